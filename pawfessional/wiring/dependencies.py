from functools import lru_cache
import logging

from pawfessional.application.ports.realtime_channel import RealtimeChannelPort
from pawfessional.application.ports.session_store import SessionStorePort
from pawfessional.application.use_cases.account import AccountSettingsUseCase, DeleteAccountCountdown
from pawfessional.application.use_cases.appointment_views import CalendarView, DashboardView, HistoryView
from pawfessional.application.use_cases.auth import (
    ChangePasswordUseCase,
    LoginUseCase,
    PasswordResetFlow,
    RegisterUseCase,
)
from pawfessional.application.use_cases.booking_wizard import BookingWizard
from pawfessional.application.use_cases.pets import PetFormUseCase
from pawfessional.application.use_cases.session import AppSession
from pawfessional.core.config import settings
from pawfessional.infrastructure.api.mobile_api_client import MobileApiClient
from pawfessional.infrastructure.realtime.event_stream_channel import EventStreamChannel
from pawfessional.infrastructure.realtime.memory_channel import MemoryRealtimeChannel
from pawfessional.infrastructure.store.json_session_store import JsonSessionStore
from pawfessional.infrastructure.store.memory_session_store import MemorySessionStore


@lru_cache
def get_api_client() -> MobileApiClient:
    return MobileApiClient()


@lru_cache
def get_session_store() -> SessionStorePort:
    if settings.SESSION_STORE.lower() == "memory":
        return MemorySessionStore()
    return JsonSessionStore(path=settings.SESSION_FILE)


@lru_cache
def get_session() -> AppSession:
    return AppSession(store=get_session_store())


@lru_cache
def get_realtime_channel() -> RealtimeChannelPort:
    logger = logging.getLogger(__name__)
    if not settings.REALTIME_ENABLED:
        logger.info("Realtime disabled; using in-memory channel")
        return MemoryRealtimeChannel()
    return EventStreamChannel(url=settings.EVENTS_URL)


def get_booking_wizard() -> BookingWizard:
    user = get_session().user
    return BookingWizard(api=get_api_client(), owner_id=user.id if user else None)


def get_dashboard_view() -> DashboardView:
    view = DashboardView(api=get_api_client(), user=get_session().user)
    view.attach(get_realtime_channel())
    return view


def get_history_view() -> HistoryView:
    user = get_session().user
    view = HistoryView(api=get_api_client(), owner_id=user.id if user else None)
    view.attach(get_realtime_channel())
    return view


def get_calendar_view() -> CalendarView:
    user = get_session().user
    view = CalendarView(api=get_api_client(), owner_id=user.id if user else None)
    view.attach(get_realtime_channel())
    return view


def get_pet_form_use_case() -> PetFormUseCase:
    user = get_session().user
    return PetFormUseCase(api=get_api_client(), owner_id=user.id if user else None)


def get_login_use_case() -> LoginUseCase:
    return LoginUseCase(api=get_api_client(), session=get_session())


def get_register_use_case() -> RegisterUseCase:
    return RegisterUseCase(api=get_api_client())


def get_password_reset_flow() -> PasswordResetFlow:
    return PasswordResetFlow(api=get_api_client())


def get_change_password_use_case() -> ChangePasswordUseCase:
    return ChangePasswordUseCase(api=get_api_client(), session=get_session())


def get_account_settings() -> tuple[AccountSettingsUseCase, DeleteAccountCountdown]:
    return AccountSettingsUseCase(api=get_api_client(), session=get_session()), DeleteAccountCountdown()
