import inspect

import anyio
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

import rolegate.models  # noqa: F401
from rolegate.auth.principal import encode_principal
from rolegate.core.background import DetachedTasks
from rolegate.core.constants import CLIENT_PRINCIPAL_HEADER
from rolegate.core.deps import get_moderation_gate, get_role_resolver
from rolegate.db.engine import get_session
from rolegate.main import app
from rolegate.moderation.gate import ModerationGate
from rolegate.moderation.schemas import ModerationRequest, ModerationVerdict
from rolegate.roles.exceptions import RegistryConflictError
from rolegate.roles.models import AdminUser
from rolegate.roles.resolver import RoleResolver
from rolegate.user.models import UserProfile, UserStatus

TRUSTED_SUFFIX = "@somos.tech"


def pytest_configure(config: pytest.Config) -> None:
    # Tests use @pytest.mark.asyncio, but we intentionally rely on anyio.
    config.addinivalue_line(
        "markers",
        "asyncio: run async tests using anyio (project-local hook)",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run @pytest.mark.asyncio tests with anyio.

    This avoids adding an external pytest-asyncio dependency.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }

    async def _run_async_test() -> None:
        await test_func(**funcargs)

    anyio.run(_run_async_test)
    return True


def _principal_payload(
    user_id: str | None = "user-123",
    email: str = "jane.doe@example.com",
    **extra,
) -> dict:
    payload = {"identityProvider": "aad", "userDetails": email, **extra}
    if user_id is not None:
        payload["userId"] = user_id
    return payload


def _principal_headers(**kwargs) -> dict[str, str]:
    """Headers carrying a client principal, as the platform would send them."""
    return {CLIENT_PRINCIPAL_HEADER: encode_principal(_principal_payload(**kwargs))}


class FakeRegistry:
    """In-memory RegistryClient with switchable failure modes."""

    def __init__(self) -> None:
        self.records: dict[str, AdminUser] = {}
        self.lookups: list[str] = []
        self.upserts: list[AdminUser] = []
        self.creates: list[AdminUser] = []
        self.find_delay: float = 0.0
        self.find_error: Exception | None = None
        self.write_error: Exception | None = None

    def add(self, email: str, roles) -> AdminUser:
        record = AdminUser(email=email, name=email, roles=roles)
        self.records[email] = record
        return record

    async def find_by_email(self, email: str) -> AdminUser | None:
        self.lookups.append(email)
        if self.find_delay:
            await anyio.sleep(self.find_delay)
        if self.find_error is not None:
            raise self.find_error
        return self.records.get(email)

    async def upsert(self, record: AdminUser) -> AdminUser:
        if self.write_error is not None:
            raise self.write_error
        self.upserts.append(record)
        self.records[record.email] = record
        return record

    async def create(self, record: AdminUser) -> AdminUser:
        if self.write_error is not None:
            raise self.write_error
        if record.email in self.records:
            raise RegistryConflictError()
        self.creates.append(record)
        self.records[record.email] = record
        return record


class FakePipeline:
    """ModerationPipeline returning a canned verdict (or raising)."""

    def __init__(
        self,
        verdict: ModerationVerdict | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.verdict = verdict or ModerationVerdict(allowed=True)
        self.error = error
        self.delay = delay
        self.requests: list[ModerationRequest] = []

    async def moderate(self, request: ModerationRequest) -> ModerationVerdict:
        self.requests.append(request)
        if self.delay:
            await anyio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.verdict


@pytest.fixture(name="session")
def session_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="registry")
def registry_fixture() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture(name="detached")
def detached_fixture() -> DetachedTasks:
    return DetachedTasks()


@pytest.fixture(name="resolver")
def resolver_fixture(registry: FakeRegistry, detached: DetachedTasks) -> RoleResolver:
    return RoleResolver(registry, detached, TRUSTED_SUFFIX, lookup_timeout=0.2)


@pytest.fixture(name="pipeline")
def pipeline_fixture() -> FakePipeline:
    return FakePipeline()


@pytest.fixture(name="gate")
def gate_fixture(pipeline: FakePipeline) -> ModerationGate:
    return ModerationGate(pipeline, timeout=0.5)


@pytest.fixture(name="test_profile")
def test_profile_fixture(session: Session) -> UserProfile:
    """Create a profile for the default test principal."""
    profile = UserProfile(
        id="user-123",
        email="jane.doe@example.com",
        display_name="Jane Doe",
        bio="Original bio",
        location="Austin, TX",
        identity_provider="aad",
        status=UserStatus.active,
    )
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@pytest.fixture(name="client")
def client_fixture(session: Session, resolver: RoleResolver, gate: ModerationGate):
    """Create a test client with overridden dependencies."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_role_resolver] = lambda: resolver
    app.dependency_overrides[get_moderation_gate] = lambda: gate

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="principal_payload")
def principal_payload_fixture():
    """Factory for raw principal payloads."""
    return _principal_payload


@pytest.fixture(name="principal_headers")
def principal_headers_fixture():
    """Factory for client-principal request headers."""
    return _principal_headers
