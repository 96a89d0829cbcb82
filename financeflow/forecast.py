import asyncio
import itertools
import logging
import math
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple, Union

import httpx

from financeflow.aggregation import weekly_totals
from financeflow.domain import ExpenseRecord, INSUFFICIENT_DATA, PREDICTION_FAILED

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
MIN_WEEKS = 2

Predictor = Callable[[List[Dict[str, float]]], Awaitable[Any]]
ForecastResult = Union[float, str]


class ForecastError(Exception):
    """The forecast collaborator could not produce a usable prediction."""


def as_prediction(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ForecastError(f"Prediction is not a number: {value!r}")
    if not math.isfinite(value):
        raise ForecastError(f"Prediction is not finite: {value!r}")
    return float(value)


class HttpForecastClient:
    """POSTs weekly totals as ``[{"amount": n}, ...]`` and reads one numeric field back."""

    def __init__(
        self,
        url: str,
        field: str = "prediction",
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.field = field
        self.timeout = timeout
        self.transport = transport

    async def __call__(self, weeks: List[Dict[str, float]]) -> float:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(self.url, json=weeks)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise ForecastError(f"HTTP error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ForecastError("Invalid JSON response") from e

        if not isinstance(data, dict) or self.field not in data:
            raise ForecastError(f"Response has no {self.field!r} field")
        return as_prediction(data[self.field])


async def predict_next_week(
    records: Iterable[ExpenseRecord],
    now: datetime,
    predictor: Predictor,
    timeout: float = DEFAULT_TIMEOUT,
) -> ForecastResult:
    """Predict next week's spending from week-relative totals.

    Returns INSUFFICIENT_DATA without calling ``predictor`` when fewer than
    two weeks have spending, and PREDICTION_FAILED on any failure of the
    call, including a timeout. A single attempt is made.
    """
    try:
        totals = weekly_totals(records, now)
        if len(totals) < MIN_WEEKS:
            return INSUFFICIENT_DATA

        payload = [{"amount": t} for t in totals]
        value = await asyncio.wait_for(predictor(payload), timeout)
        return as_prediction(value)
    except asyncio.TimeoutError:
        logger.warning("Forecast timed out after %.1fs", timeout)
    except Exception as e:
        logger.warning("Forecast failed: %s", e)
    return PREDICTION_FAILED


class ForecastCoordinator:
    """Runs forecasts that may overlap and keeps the newest-issued result.

    Each call is tagged with an increasing request id. A completion is
    applied to ``latest`` only if no later-issued call has been applied.
    """

    def __init__(self, predictor: Predictor, timeout: float = DEFAULT_TIMEOUT):
        self.predictor = predictor
        self.timeout = timeout
        self._ids = itertools.count(1)
        self._applied_id = 0
        self.latest: Optional[ForecastResult] = None

    @property
    def latest_id(self) -> int:
        return self._applied_id

    async def request(
        self, records: Iterable[ExpenseRecord], now: datetime
    ) -> Tuple[int, ForecastResult]:
        request_id = next(self._ids)
        result = await predict_next_week(records, now, self.predictor, self.timeout)
        if request_id > self._applied_id:
            self._applied_id = request_id
            self.latest = result
        else:
            logger.debug("Discarding forecast %d, %d already applied", request_id, self._applied_id)
        return request_id, result
