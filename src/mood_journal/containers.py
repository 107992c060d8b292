"""Dependency container wiring for the application."""

from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from mood_journal.adapters.supabase_entry_repository import SupabaseEntryRepository
from mood_journal.adapters.supabase_user_repository import SupabaseUserRepository
from mood_journal.config import Settings
from mood_journal.services.accounts import AccountService, UserRepository
from mood_journal.services.entries import EntryRepository, MoodEntryService
from mood_journal.services.media import AccessGuard, MediaStorage
from mood_journal.services.passwords import BcryptCredentialVerifier
from mood_journal.services.rate_limit import RequestRateLimiter
from mood_journal.services.sniffer import ContentSniffer
from mood_journal.services.throttle import InMemoryLoginAttemptStore, LoginThrottle
from mood_journal.services.tokens import TokenService
from mood_journal.services.uploads import UploadReconciler


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    token_service: TokenService
    account_service: AccountService
    entry_service: MoodEntryService
    upload_reconciler: UploadReconciler
    media_storage: MediaStorage
    access_guard: AccessGuard
    rate_limiter: RequestRateLimiter


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    return wire_container(
        resolved_settings,
        user_repository=SupabaseUserRepository(supabase_client),
        entry_repository=SupabaseEntryRepository(supabase_client),
    )


def wire_container(
    settings: Settings,
    user_repository: UserRepository,
    entry_repository: EntryRepository,
) -> AppContainer:
    """Assemble services around the given repositories."""
    token_service = TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_in=timedelta(seconds=settings.jwt_expires_in_seconds),
    )
    throttle = LoginThrottle(
        store=InMemoryLoginAttemptStore(),
        max_attempts=settings.login_max_attempts,
        lockout_seconds=settings.login_lockout_seconds,
    )
    account_service = AccountService(
        repository=user_repository,
        verifier=BcryptCredentialVerifier(rounds=settings.bcrypt_rounds),
        tokens=token_service,
        throttle=throttle,
    )
    media_storage = MediaStorage(settings.upload_dir)
    access_guard = AccessGuard()
    entry_service = MoodEntryService(
        repository=entry_repository,
        storage=media_storage,
        guard=access_guard,
    )
    upload_reconciler = UploadReconciler(
        sniffer=ContentSniffer(max_pixels=settings.max_image_pixels),
        storage=media_storage,
        entries=entry_repository,
    )
    return AppContainer(
        settings=settings,
        token_service=token_service,
        account_service=account_service,
        entry_service=entry_service,
        upload_reconciler=upload_reconciler,
        media_storage=media_storage,
        access_guard=access_guard,
        rate_limiter=RequestRateLimiter(enabled=settings.rate_limits_enabled),
    )
