"""gRPC servicer: the entry point for calls from the UI and notification layer.

Requests and responses are ``google.protobuf.Struct`` messages, so the
service is registered through a generic handler and needs no generated
stubs.  Field names in both directions use the app's camelCase keys.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable

import grpc

from moodinsights.synthesizer import InsightSynthesizer

logger = logging.getLogger(__name__)

SERVICE_NAME = "moodinsights.InsightsService"


class InsightsServicer:
    """Implements ``moodinsights.InsightsService``.

    Register it on a server with :func:`add_insights_servicer_to_server`.

    Args:
        synthesizer: The :class:`~moodinsights.synthesizer.InsightSynthesizer`.
    """

    def __init__(self, synthesizer: InsightSynthesizer) -> None:
        self._synthesizer = synthesizer

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------

    def GenerateInsights(self, request: Any, context: Any) -> Any:
        """Run (or reuse) today's generation pass.

        Args:
            request: ``Struct`` with optional boolean ``forceRefresh``.
            context: gRPC service context.

        Returns:
            ``Struct`` with an ``insights`` list, ranked.
        """
        params = _to_dict(request)
        force = params.get("forceRefresh", False)
        if not isinstance(force, bool):
            return _abort(context, grpc.StatusCode.INVALID_ARGUMENT, "forceRefresh must be a boolean")
        try:
            insights = self._synthesizer.generate_insights(force_refresh=force)
        except Exception:
            logger.exception("Unexpected error generating insights (force=%r)", force)
            return _abort(context, grpc.StatusCode.INTERNAL, "Internal error generating insights.")
        return _to_struct({"insights": [i.to_dict() for i in insights]})

    def LoadInsights(self, request: Any, context: Any) -> Any:
        """Return stored insights, newest first, without recomputing."""
        try:
            insights = self._synthesizer.load_insights()
        except Exception:
            logger.exception("Unexpected error loading insights")
            return _abort(context, grpc.StatusCode.INTERNAL, "Internal error loading insights.")
        return _to_struct({"insights": [i.to_dict() for i in insights]})

    def MarkInsightRead(self, request: Any, context: Any) -> Any:
        """Flag one stored insight as read.

        Args:
            request: ``Struct`` with a non-empty string ``id``.
            context: gRPC service context.

        Returns:
            ``Struct`` with the updated ``insight``.
        """
        insight_id = _to_dict(request).get("id")
        if not insight_id or not isinstance(insight_id, str):
            return _abort(context, grpc.StatusCode.INVALID_ARGUMENT, "id must be a non-empty string")
        try:
            insight = self._synthesizer.mark_insight_read(insight_id)
        except KeyError:
            return _abort(context, grpc.StatusCode.NOT_FOUND, f"No insight with id {insight_id!r}")
        except Exception:
            logger.exception("Unexpected error marking insight %r as read", insight_id)
            return _abort(context, grpc.StatusCode.INTERNAL, "Internal error updating insight.")
        return _to_struct({"insight": insight.to_dict()})

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def UpdateSettings(self, request: Any, context: Any) -> Any:
        """Change the per-category toggles.

        Args:
            request: ``Struct`` of boolean toggles, e.g.
                ``{"patternAlerts": false}``.  An empty request changes
                nothing and returns the current settings.
            context: gRPC service context.

        Returns:
            ``Struct`` with the full ``settings`` after the update.
        """
        changes = _to_dict(request)
        if not all(isinstance(v, bool) for v in changes.values()):
            return _abort(context, grpc.StatusCode.INVALID_ARGUMENT, "settings must be booleans")
        try:
            settings = self._synthesizer.update_settings(**changes)
        except KeyError as exc:
            return _abort(context, grpc.StatusCode.INVALID_ARGUMENT, f"Unknown setting: {exc.args[0]}")
        except Exception:
            logger.exception("Unexpected error updating settings %r", changes)
            return _abort(context, grpc.StatusCode.INTERNAL, "Internal error updating settings.")
        return _to_struct({"settings": settings})

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def GenerateWeeklySummary(self, request: Any, context: Any) -> Any:
        """Weekly report for ``weekStart`` (ISO date) or the current week."""
        return self._summary(
            request, context, "weekStart", self._synthesizer.generate_weekly_summary
        )

    def GenerateMonthlySummary(self, request: Any, context: Any) -> Any:
        """Monthly report for the month of ``monthStart`` or the current month."""
        return self._summary(
            request, context, "monthStart", self._synthesizer.generate_monthly_summary
        )

    def _summary(
        self,
        request: Any,
        context: Any,
        field: str,
        build: Callable[[date | None], Any],
    ) -> Any:
        raw = _to_dict(request).get(field)
        try:
            start = date.fromisoformat(raw) if raw else None
        except (TypeError, ValueError):
            return _abort(
                context, grpc.StatusCode.INVALID_ARGUMENT, f"{field} must be an ISO date (YYYY-MM-DD)"
            )
        try:
            summary = build(start)
        except Exception:
            logger.exception("Unexpected error building summary for %s=%r", field, raw)
            return _abort(context, grpc.StatusCode.INTERNAL, "Internal error building summary.")
        return _to_struct({"summary": summary.to_dict()})


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

_METHODS = (
    "GenerateInsights",
    "LoadInsights",
    "MarkInsightRead",
    "GenerateWeeklySummary",
    "GenerateMonthlySummary",
    "UpdateSettings",
)


def add_insights_servicer_to_server(servicer: InsightsServicer, server: grpc.Server) -> None:
    """Register every method of *servicer* as a unary-unary ``Struct`` RPC."""
    from google.protobuf.struct_pb2 import Struct

    handlers = {
        name: grpc.unary_unary_rpc_method_handler(
            getattr(servicer, name),
            request_deserializer=Struct.FromString,
            response_serializer=Struct.SerializeToString,
        )
        for name in _METHODS
    }
    server.add_generic_rpc_handlers(
        (grpc.method_handlers_generic_handler(SERVICE_NAME, handlers),)
    )


# ---------------------------------------------------------------------------
# Struct helpers
# ---------------------------------------------------------------------------


def _to_dict(message: Any) -> dict[str, Any]:
    from google.protobuf import json_format

    return json_format.MessageToDict(message)


def _to_struct(payload: dict[str, Any]) -> Any:
    from google.protobuf import json_format
    from google.protobuf.struct_pb2 import Struct

    return json_format.ParseDict(payload, Struct())


def _abort(context: Any, code: grpc.StatusCode, details: str) -> Any:
    """Set the error status on *context* and return an empty ``Struct``."""
    from google.protobuf.struct_pb2 import Struct

    context.set_code(code)
    context.set_details(details)
    return Struct()
