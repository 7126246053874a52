"""
app/context.py

Per-browser-session wiring: one API client, one set of stores and one
capture session per Streamlit session, kept in ``st.session_state``.
Nothing here is a module-level singleton, so two browser tabs never share
staged photos or report lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import streamlit as st

from pipelines.comparison import ComparisonOrchestrator
from pipelines.upload import UploadPipeline
from services.api_client import ApiClient
from services.config import ApiConfig
from services.reports import ReportService
from services.trackers import TrackerService
from services.users import UserService
from stores.capture_session import CaptureSession
from stores.models import UserInfo
from stores.report_store import ReportStore
from stores.tasks import CancelToken, RequestScope
from stores.tracking_store import TrackingStore

logger = logging.getLogger(__name__)

_CTX_KEY = "vt_context"
_SCOPE_KEY = "vt_scope"


@dataclass
class AppContext:
    config: ApiConfig
    client: ApiClient
    report_service: ReportService
    tracker_service: TrackerService
    user_service: UserService
    report_store: ReportStore
    tracking_store: TrackingStore
    capture: CaptureSession
    uploads: UploadPipeline
    comparison: ComparisonOrchestrator
    user_info: Optional[UserInfo] = field(default=None)

    @classmethod
    def build(cls, config: ApiConfig) -> "AppContext":
        client = ApiClient(config)
        report_service = ReportService(client)
        tracker_service = TrackerService(client)
        report_store = ReportStore(report_service)
        capture = CaptureSession()
        return cls(
            config=config,
            client=client,
            report_service=report_service,
            tracker_service=tracker_service,
            user_service=UserService(client),
            report_store=report_store,
            tracking_store=TrackingStore(tracker_service),
            capture=capture,
            uploads=UploadPipeline(report_service, report_store, capture),
            comparison=ComparisonOrchestrator(report_service, report_store),
        )


def get_context() -> AppContext:
    ctx = st.session_state.get(_CTX_KEY)
    if ctx is None:
        ctx = AppContext.build(ApiConfig.from_env())
        st.session_state[_CTX_KEY] = ctx
        logger.info("New session context (backend %s)", ctx.config.base_url)
    return ctx


def enter_page(page_key: str) -> RequestScope:
    """
    Open the request scope for *page_key*; leaving a page closes its scope
    so responses that arrive afterwards are ignored.
    """
    scope: Optional[RequestScope] = st.session_state.get(_SCOPE_KEY)
    if scope is not None and scope.name == page_key and not scope.closed:
        return scope
    if scope is not None:
        scope.close()
    scope = RequestScope(page_key)
    st.session_state[_SCOPE_KEY] = scope
    return scope


def page_token() -> CancelToken:
    scope: Optional[RequestScope] = st.session_state.get(_SCOPE_KEY)
    if scope is None:
        scope = enter_page(st.session_state.get("current_page", "overview"))
    return scope.token()


def current_scope() -> Optional[RequestScope]:
    return st.session_state.get(_SCOPE_KEY)
