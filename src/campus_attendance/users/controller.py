from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.http import json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        payload = json_body()
        user = container.auth_service.authenticate(payload.get("email", ""), payload.get("password", ""))

        session.clear()
        session["organizer_id"] = user.organizer_id
        session["name"] = user.full_name
        session["email"] = user.email
        session["role"] = user.role.value
        app.logger.info("Organizer %s logged in", user.organizer_id)

        return jsonify(
            {
                "success": True,
                "user": {
                    "id": user.organizer_id,
                    "name": user.full_name,
                    "email": user.email,
                    "role": user.role.value,
                },
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify(
            {
                "id": session["organizer_id"],
                "name": session.get("name"),
                "email": session.get("email"),
                "role": session.get("role"),
            }
        )
