"""Derive response analytics from the provider's post-call analysis."""

from typing import Any, Optional

import structlog
from sqlalchemy.orm import Session

from vocalhire.integrations.retell import RetellClient
from vocalhire.models import Interview, Response
from vocalhire.schemas.calls import ProviderCall

logger = structlog.get_logger()


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def build_analytics(call: ProviderCall, metric_weights: Optional[dict[str, float]] = None) -> Optional[dict[str, Any]]:
    """Analytics blob for a call, or None if the provider has not analysed it.

    `overall_score` is the weighted mean of the custom metric scores named in
    `metric_weights`; without usable weights the provider's own
    `overall_score` custom field is used, if any.
    """
    analysis = call.call_analysis
    if not analysis:
        return None

    custom = analysis.get("custom_analysis_data")
    if not isinstance(custom, dict):
        custom = {}
    metric_scores = {}
    for metric in metric_weights or {}:
        score = _number(custom.get(metric))
        if score is not None:
            metric_scores[metric] = score

    overall_score = None
    total_weight = sum(float(metric_weights[m]) for m in metric_scores) if metric_scores else 0
    if total_weight > 0:
        weighted = sum(score * float(metric_weights[m]) for m, score in metric_scores.items())
        overall_score = round(weighted / total_weight, 2)
    else:
        overall_score = _number(custom.get("overall_score"))

    return {
        "overall_score": overall_score,
        "call_summary": analysis.get("call_summary"),
        "user_sentiment": analysis.get("user_sentiment"),
        "call_successful": analysis.get("call_successful"),
        "metric_scores": metric_scores,
    }


class CallAnalysisService:
    """Fetches a finished call and stores its analytics on the response."""

    def __init__(self, db: Session, retell: RetellClient):
        self.db = db
        self.retell = retell

    async def analyze(self, call_id: str, refresh: bool = True) -> tuple[dict[str, Any], Optional[dict[str, Any]]]:
        """Return (call payload, analytics), persisting both when a row exists.

        With `refresh=False`, an already analysed response is served from
        the store without contacting the provider.

        Raises:
            RetellError: If the provider fetch fails
        """
        response = self.db.query(Response).filter(Response.call_id == call_id).first()
        if not refresh and response and response.is_analysed and response.analytics:
            return response.details or {}, response.analytics

        payload = await self.retell.get_call(call_id)
        call = ProviderCall.model_validate(payload)

        weights = None
        if response:
            interview = self.db.query(Interview).filter(Interview.id == response.interview_id).first()
            weights = interview.metric_weights if interview else None

        analytics = build_analytics(call, weights)

        if response:
            response.details = call.to_details()
            if call.duration_seconds():
                response.duration = call.duration_seconds()
            response.is_analysed = True
            if analytics is not None:
                response.analytics = analytics
            self.db.commit()
            logger.info(
                "Call analytics stored",
                call_id=call_id,
                interview_id=response.interview_id,
                has_analytics=analytics is not None,
            )
        else:
            logger.warning("Analysed call has no stored response", call_id=call_id)

        return call.to_details(), analytics
