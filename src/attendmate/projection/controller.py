from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import ok
from ..common.identity import user_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    analytics = container.analytics_service

    @app.route("/api/analytics", methods=["GET"], endpoint="analytics_report")
    @user_required
    def analytics_report(user_id: str):
        start = request.args.get("start")
        end = request.args.get("end")
        report = analytics.build_report(
            user_id=user_id,
            start=parse_iso_date(start) if start else None,
            end=parse_iso_date(end) if end else None,
        )
        return ok(report.as_dict())

    @app.route("/api/analytics/what-if", methods=["GET"], endpoint="analytics_what_if")
    @user_required
    def analytics_what_if(user_id: str):
        skip = request.args.get("skip", type=int)
        if skip is None:
            raise ValidationError("skip must be a whole number")
        result = analytics.simulate_skip(
            user_id=user_id,
            skip=skip,
            subject_id=request.args.get("subject_id") or None,
        )
        return ok(result)
