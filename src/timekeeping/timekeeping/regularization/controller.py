from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_body, login_required, ok
from ..container import Container
from ..queries.service import build_regularization_filter


def register(app: Flask, container: Container) -> None:
    def caller():
        return current_caller(container.identity)

    @app.route("/attendance/regularize", methods=["POST"], endpoint="regularization_submit")
    @login_required
    def submit_regularization():
        body = json_body()
        req = container.regularization_service.submit(
            caller=caller(),
            employee_id=body.get("employee_id"),
            work_date=body.get("date"),
            requested_clock_in=body.get("requested_clock_in"),
            requested_clock_out=body.get("requested_clock_out"),
            reason=body.get("reason"),
        )
        return ok("Regularization request submitted", req.to_dict(), 201)

    @app.route("/attendance/regularize", methods=["GET"], endpoint="regularization_list")
    @login_required
    def list_regularizations():
        args = request.args
        criteria = build_regularization_filter(
            employee_id=args.get("employee_id"),
            start_date=args.get("start_date"),
            end_date=args.get("end_date"),
            status=args.get("status"),
        )
        page = container.query_service.page_request(args.get("page"), args.get("limit"))
        result = container.regularization_service.list_requests(criteria, page, caller=caller())
        return ok("Regularization requests", list(result.items), pagination=result.pagination())

    @app.route("/attendance/regularize/<int:request_id>", methods=["GET"], endpoint="regularization_get")
    @login_required
    def get_regularization(request_id: int):
        return ok("Regularization request", container.query_service.get_regularization(request_id, caller=caller()))

    @app.route("/attendance/regularize/<int:request_id>", methods=["PUT"], endpoint="regularization_decide")
    @login_required
    def decide_regularization(request_id: int):
        body = json_body()
        req = container.regularization_service.decide(
            request_id,
            body.get("status"),
            caller=caller(),
            note=body.get("note"),
        )
        return ok(f"Regularization request {req.status.value}", req.to_dict())
