"""Ordered route probing for ticket updates.

Older mill backends disagree on how a ticket is edited, so the client walks a
fixed list of request shapes. A 404 or 405 means the server has no such route
and the next shape is tried; any other failure is final. The current API
answers the second shape (``PUT /batches/{id}``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from cli.client import ApiClient, ApiError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointAttempt:
    method: str
    path: str
    id_in_body: bool = False
    method_override: Optional[str] = None

    def url(self, ticket_id: int) -> str:
        return self.path.format(id=ticket_id)

    def body(self, ticket_id: int, payload: Mapping[str, Any]) -> Dict[str, Any]:
        body: Dict[str, Any] = {"id": ticket_id} if self.id_in_body else {}
        body.update(payload)
        if self.method_override:
            body["_method"] = self.method_override
        return body


TICKET_UPDATE_ATTEMPTS: Tuple[EndpointAttempt, ...] = (
    EndpointAttempt("POST", "/batches/{id}", method_override="PATCH"),
    EndpointAttempt("PUT", "/batches/{id}"),
    EndpointAttempt("POST", "/batches/{id}", method_override="PUT"),
    EndpointAttempt("POST", "/batches/update/{id}"),
    EndpointAttempt("POST", "/batches/{id}/update"),
    EndpointAttempt("POST", "/batches/update", id_in_body=True),
    EndpointAttempt("POST", "/batches", id_in_body=True, method_override="PATCH"),
    EndpointAttempt("PUT", "/batches", id_in_body=True),
)


def update_ticket_with_fallback(
    client: ApiClient,
    ticket_id: int,
    payload: Mapping[str, Any],
    attempts: Tuple[EndpointAttempt, ...] = TICKET_UPDATE_ATTEMPTS,
) -> Any:
    """Send ``payload`` through each attempt in order until one is routed.

    Returns the parsed response of the first attempt that succeeds. Errors
    other than a route miss propagate at once; if every attempt misses, the
    last miss is raised.
    """
    if not attempts:
        raise ValueError("At least one endpoint attempt is required.")

    for number, attempt in enumerate(attempts, start=1):
        url = attempt.url(ticket_id)
        try:
            return client.request(attempt.method, url, json=attempt.body(ticket_id, payload))
        except ApiError as exc:
            if not exc.is_route_miss:
                raise
            logger.debug(
                "Ticket update route missed",
                extra={"attempt": number, "endpoint": f"{attempt.method} {url}", "status_code": exc.status_code},
            )
            if number == len(attempts):
                raise
