from dataclasses import dataclass

from src.taskflow.core.services import (
    AccountResolver,
    DbSessionService,
    IdentityStore,
    RoleAssignmentService,
    SessionIssuer,
    SessionVerifier,
    TelegramBotService,
    TelegramLoginService,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    identity_store: IdentityStore
    account_resolver: AccountResolver
    role_assignment_service: RoleAssignmentService
    session_issuer: SessionIssuer
    session_verifier: SessionVerifier
    telegram_login_service: TelegramLoginService
    telegram_bot_service: TelegramBotService

    @classmethod
    def build(
        cls,
        database_service: DbSessionService,
        telegram_bot_service: TelegramBotService | None = None,
    ) -> "ApplicationDependencies":
        """Wire the service graph around one database service."""
        store = IdentityStore(database_service)
        resolver = AccountResolver(store)
        issuer = SessionIssuer()
        return cls(
            database_service=database_service,
            identity_store=store,
            account_resolver=resolver,
            role_assignment_service=RoleAssignmentService(store),
            session_issuer=issuer,
            session_verifier=SessionVerifier(),
            telegram_login_service=TelegramLoginService(resolver, issuer),
            telegram_bot_service=telegram_bot_service
            or TelegramBotService(database_service),
        )
