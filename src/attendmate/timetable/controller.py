from __future__ import annotations

from flask import Flask

from ..common.http import json_body, ok
from ..common.identity import user_required
from ..container import Container


def _week_payload(week) -> dict:
    return {day.value: [s.as_dict() for s in slots] for day, slots in week.items()}


def register(app: Flask, container: Container) -> None:
    service = container.timetable_service

    @app.route("/api/timetable", methods=["GET"], endpoint="timetable_get")
    @user_required
    def timetable_get(user_id: str):
        return ok(_week_payload(service.get_week(user_id=user_id)))

    @app.route("/api/timetable", methods=["PUT"], endpoint="timetable_replace")
    @user_required
    def timetable_replace(user_id: str):
        week = service.replace_week(user_id=user_id, payload=json_body())
        return ok(_week_payload(week))

    @app.route("/api/timetable/<day>/slots", methods=["POST"], endpoint="timetable_add_slot")
    @user_required
    def timetable_add_slot(day: str, user_id: str):
        data = json_body()
        slot = service.add_slot(
            user_id=user_id,
            day=day,
            subject_id=str(data.get("subject_id") or ""),
            start=data.get("start_time") or "",
            duration_hours=data.get("duration_hours"),
        )
        return ok(slot.as_dict(), 201)

    @app.route("/api/timetable/<day>/slots/<slot_id>", methods=["DELETE"], endpoint="timetable_remove_slot")
    @user_required
    def timetable_remove_slot(day: str, slot_id: str, user_id: str):
        service.remove_slot(user_id=user_id, day=day, slot_id=slot_id)
        return ok({"slot_id": slot_id})

    @app.route("/api/timetable/<day>/copy-previous", methods=["POST"], endpoint="timetable_copy_previous")
    @user_required
    def timetable_copy_previous(day: str, user_id: str):
        slots = service.copy_previous_day(user_id=user_id, day=day)
        return ok([s.as_dict() for s in slots])
