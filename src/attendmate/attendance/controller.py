from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import json_body, ok
from ..common.identity import user_required
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from ..projection.engine import project
from ..projection.service import count_present, ledger_stats


def _required(data: dict, *fields: str) -> None:
    missing = [f for f in fields if not str(data.get(f) or "").strip()]
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger_service

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @user_required
    def attendance_list(user_id: str):
        matching = ledger.list_records(
            user_id=user_id,
            subject_id=request.args.get("subject_id") or None,
            status=request.args.get("status") or None,
            start_date=request.args.get("start") or None,
            end_date=request.args.get("end") or None,
        )
        # Stats cover every matching record; the limit only trims the page.
        limit = max(0, request.args.get("limit", DEFAULT_HISTORY_LIMIT, type=int))
        return ok({"records": [r.as_dict() for r in matching[:limit]], "stats": ledger_stats(matching)})

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_mark")
    @user_required
    def attendance_mark(user_id: str):
        data = json_body()
        _required(data, "subject_id", "date", "start_time", "end_time", "status")
        record = ledger.mark_attendance(
            user_id=user_id,
            subject_id=str(data["subject_id"]),
            on=str(data["date"]),
            start=str(data["start_time"]),
            end=str(data["end_time"]),
            status=str(data["status"]),
            note=data.get("note"),
        )
        return ok(record.as_dict(), 201)

    @app.route("/api/attendance/<subject_id>/<record_id>", methods=["GET"], endpoint="attendance_get")
    @user_required
    def attendance_get(subject_id: str, record_id: str, user_id: str):
        record = ledger.get_record(user_id=user_id, subject_id=subject_id, record_id=record_id)
        return ok(record.as_dict())

    @app.route("/api/attendance/<subject_id>/<record_id>", methods=["PUT"], endpoint="attendance_edit")
    @user_required
    def attendance_edit(subject_id: str, record_id: str, user_id: str):
        data = json_body()
        _required(data, "date", "start_time", "end_time", "status")
        kwargs = {}
        if "note" in data:
            kwargs["note"] = data.get("note")
        record = ledger.edit_attendance(
            user_id=user_id,
            subject_id=subject_id,
            record_id=record_id,
            new_date=str(data["date"]),
            new_start=str(data["start_time"]),
            new_end=str(data["end_time"]),
            new_status=str(data["status"]),
            **kwargs,
        )
        return ok(record.as_dict())

    @app.route("/api/attendance/<subject_id>/<record_id>", methods=["DELETE"], endpoint="attendance_delete")
    @user_required
    def attendance_delete(subject_id: str, record_id: str, user_id: str):
        deleted = ledger.delete_attendance(user_id=user_id, subject_id=subject_id, record_id=record_id)
        return ok({"deleted": deleted})

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @user_required
    def dashboard(user_id: str):
        now = now_local()
        active = container.detector_for(user_id).detect(now)

        present, total = count_present(ledger.list_records(user_id=user_id))
        names = {s.subject_id: s.name for s in container.subjects_repo.list_for_user(user_id=user_id)}
        today = [
            dict(r.as_dict(), subject_name=names.get(r.subject_id, "Unknown Subject"))
            for r in ledger.list_for_date(user_id=user_id, on=now.date())
        ]
        return ok(
            {
                "overall": project(present, total).as_dict(),
                "today": today,
                "active_lecture": active.as_dict() if active else None,
            }
        )

    @app.route("/api/dashboard/active-lecture", methods=["POST"], endpoint="dashboard_active_lecture")
    @user_required
    def dashboard_active_lecture(user_id: str):
        data = json_body()
        _required(data, "subject_id", "date", "start_time", "end_time", "status")

        # The answer belongs to the lecture that was prompted, even if it has ended since.
        detector = container.detector_for(user_id)
        lecture = detector.restore(
            subject_id=str(data["subject_id"]),
            on=str(data["date"]),
            start=str(data["start_time"]),
            end=str(data["end_time"]),
            now=now_local(),
        )
        if lecture is None:
            return ok({"marked": False, "record": None})

        record = detector.submit(str(data["status"]), note=data.get("note"))
        return ok({"marked": record is not None, "record": record.as_dict() if record else None})
