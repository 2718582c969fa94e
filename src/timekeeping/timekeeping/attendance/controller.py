from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_body, login_required, ok
from ..common.validators import optional_int
from ..container import Container
from ..queries.service import build_attendance_filter


def register(app: Flask, container: Container) -> None:
    def caller():
        return current_caller(container.identity)

    @app.route("/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @login_required
    def clock_in():
        body = json_body()
        record = container.attendance_service.clock_in(
            optional_int(body.get("employee_id"), "employee_id"),
            caller=caller(),
        )
        return ok("Clocked in", record.to_dict())

    @app.route("/attendance/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @login_required
    def clock_out():
        body = json_body()
        record = container.attendance_service.clock_out(
            optional_int(body.get("employee_id"), "employee_id"),
            caller=caller(),
        )
        return ok("Clocked out", record.to_dict())

    @app.route("/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def list_attendance():
        args = request.args
        criteria = build_attendance_filter(
            employee_id=args.get("employee_id"),
            start_date=args.get("start_date"),
            end_date=args.get("end_date"),
            status=args.get("status"),
        )
        page = container.query_service.page_request(args.get("page"), args.get("limit"))
        result = container.query_service.list_attendance(criteria, page, caller=caller())
        return ok("Attendance records", list(result.items), pagination=result.pagination())

    @app.route("/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @login_required
    def get_attendance(attendance_id: int):
        return ok("Attendance record", container.query_service.get_attendance(attendance_id, caller=caller()))

    @app.route("/attendance", methods=["POST"], endpoint="attendance_create")
    @login_required
    def create_attendance():
        body = json_body()
        record = container.attendance_service.create_record(
            caller=caller(),
            employee_id=body.get("employee_id"),
            work_date=body.get("date"),
            clock_in=body.get("clock_in"),
            clock_out=body.get("clock_out"),
            status=body.get("status"),
            notes=body.get("notes"),
        )
        return ok("Attendance record created", record.to_dict(), 201)

    @app.route("/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @login_required
    def update_attendance(attendance_id: int):
        record = container.attendance_service.update_record(attendance_id, json_body(), caller=caller())
        return ok("Attendance record updated", record.to_dict())

    @app.route("/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @login_required
    def delete_attendance(attendance_id: int):
        container.attendance_service.delete_record(attendance_id, caller=caller())
        return ok("Attendance record deleted")
