from __future__ import annotations

from flask import Flask

from ..common.http import json_body, ok
from ..common.identity import user_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/subjects", methods=["GET"], endpoint="subjects_list")
    @user_required
    def subjects_list(user_id: str):
        return ok(container.subject_service.list_with_projection(user_id=user_id))

    @app.route("/api/subjects", methods=["POST"], endpoint="subjects_create")
    @user_required
    def subjects_create(user_id: str):
        data = json_body()
        subject = container.subject_service.create(user_id=user_id, name=str(data.get("name") or ""))
        return ok({"subject_id": subject.subject_id, "name": subject.name}, 201)

    @app.route("/api/subjects/<subject_id>", methods=["DELETE"], endpoint="subjects_delete")
    @user_required
    def subjects_delete(subject_id: str, user_id: str):
        container.subject_service.delete(user_id=user_id, subject_id=subject_id)
        return ok({"subject_id": subject_id})
