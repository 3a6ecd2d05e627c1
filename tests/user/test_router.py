"""Tests for user domain router."""

from fastapi.testclient import TestClient
from sqlmodel import Session

from rolegate.moderation.exceptions import ModerationUnavailableError
from rolegate.moderation.gate import GUIDELINES_VIOLATION_MESSAGE
from rolegate.moderation.schemas import ModerationVerdict
from rolegate.user.models import UserProfile, UserStatus

# --- GET /users/me ---


def test_get_me_creates_profile_on_first_visit(
    client: TestClient, session: Session, principal_headers
):
    """Test GET /users/me creates a profile from the principal."""
    response = client.get("/users/me", headers=principal_headers(user_id="new-1"))

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "new-1"
    assert data["displayName"] == "Jane Doe"
    assert data["showLocation"] is True
    assert data["createdAt"].endswith("Z")
    assert "statusChangedBy" not in data
    assert "status_changed_by" not in data
    assert session.get(UserProfile, "new-1") is not None


def test_get_me_existing_profile(
    client: TestClient, test_profile: UserProfile, principal_headers
):
    response = client.get("/users/me", headers=principal_headers())

    assert response.status_code == 200
    data = response.json()
    assert data["bio"] == "Original bio"
    assert data["loginCount"] == 1


def test_get_me_unauthenticated(client: TestClient):
    """Test GET /users/me without a principal returns 401."""
    response = client.get("/users/me")

    assert response.status_code == 401
    assert response.json() == {
        "type": "principal_required",
        "message": "Authentication required",
    }


def test_get_me_principal_without_user_id(client: TestClient, principal_headers):
    response = client.get("/users/me", headers=principal_headers(user_id=None))

    assert response.status_code == 401


def test_get_me_blocked(
    client: TestClient, session: Session, test_profile: UserProfile, principal_headers
):
    test_profile.status = UserStatus.blocked
    test_profile.status_changed_by = "admin@somos.tech"
    session.add(test_profile)
    session.commit()

    response = client.get("/users/me", headers=principal_headers())

    assert response.status_code == 403
    assert response.json()["type"] == "user_blocked"
    assert "admin@somos.tech" not in response.text


# --- PUT /users/me ---


def test_update_me(
    client: TestClient,
    session: Session,
    test_profile: UserProfile,
    pipeline,
    principal_headers,
):
    """Test PUT /users/me validates, moderates and persists the update."""
    response = client.put(
        "/users/me",
        headers=principal_headers(),
        json={"displayName": "  Jane D.  ", "bio": "Hello", "showLocation": False},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["displayName"] == "Jane D."
    assert data["bio"] == "Hello"
    assert data["showLocation"] is False
    assert "statusChangedBy" not in data

    assert len(pipeline.requests) == 1
    assert pipeline.requests[0].text == "Jane D. Hello"
    assert pipeline.requests[0].content_id == "profile-user-123"

    session.refresh(test_profile)
    assert test_profile.display_name == "Jane D."


def test_update_me_bio_too_long_writes_nothing(
    client: TestClient,
    session: Session,
    test_profile: UserProfile,
    pipeline,
    principal_headers,
):
    response = client.put(
        "/users/me", headers=principal_headers(), json={"bio": "x" * 501}
    )

    assert response.status_code == 400
    assert response.json() == {
        "type": "profile_validation_error",
        "message": "Bio must be 500 characters or less",
        "field": "bio",
    }
    assert pipeline.requests == []
    session.refresh(test_profile)
    assert test_profile.bio == "Original bio"


def test_update_me_unknown_field(
    client: TestClient, test_profile: UserProfile, principal_headers
):
    response = client.put(
        "/users/me", headers=principal_headers(), json={"status": "active"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid fields: status"


def test_update_me_body_must_be_object(
    client: TestClient, test_profile: UserProfile, principal_headers
):
    response = client.put("/users/me", headers=principal_headers(), json=["bio"])

    assert response.status_code == 400
    assert response.json() == {
        "type": "bad_request",
        "message": "Request body must be a JSON object",
    }


def test_update_me_invalid_json(
    client: TestClient, test_profile: UserProfile, principal_headers
):
    response = client.put(
        "/users/me",
        headers={**principal_headers(), "Content-Type": "application/json"},
        content=b"{bio",
    )

    assert response.status_code == 400


def test_update_me_blocked_by_moderation(
    client: TestClient,
    session: Session,
    test_profile: UserProfile,
    pipeline,
    principal_headers,
):
    pipeline.verdict = ModerationVerdict.model_validate(
        {
            "allowed": False,
            "action": "block",
            "tier1Result": {"passed": False, "matches": ["slur"]},
            "tier2Result": {"passed": False, "issues": ["bad link"]},
        }
    )

    response = client.put(
        "/users/me", headers=principal_headers(), json={"bio": "something nasty"}
    )

    assert response.status_code == 400
    assert response.json() == {
        "type": "moderation_blocked",
        "message": GUIDELINES_VIOLATION_MESSAGE,
    }
    session.refresh(test_profile)
    assert test_profile.bio == "Original bio"


def test_update_me_moderation_outage_fails_open(
    client: TestClient,
    session: Session,
    test_profile: UserProfile,
    pipeline,
    principal_headers,
):
    pipeline.error = ModerationUnavailableError()

    response = client.put(
        "/users/me", headers=principal_headers(), json={"bio": "Still saved"}
    )

    assert response.status_code == 200
    session.refresh(test_profile)
    assert test_profile.bio == "Still saved"


def test_update_me_blocked_user(
    client: TestClient,
    session: Session,
    test_profile: UserProfile,
    pipeline,
    principal_headers,
):
    test_profile.status = UserStatus.blocked
    session.add(test_profile)
    session.commit()

    response = client.put(
        "/users/me", headers=principal_headers(), json={"bio": "Let me in"}
    )

    assert response.status_code == 403
    assert pipeline.requests == []


def test_update_me_without_profile(client: TestClient, principal_headers):
    response = client.put(
        "/users/me", headers=principal_headers(user_id="ghost"), json={"bio": "Hi"}
    )

    assert response.status_code == 404
    assert response.json()["type"] == "user_not_found"


def test_update_me_unauthenticated(client: TestClient):
    response = client.put("/users/me", json={"bio": "Hi"})

    assert response.status_code == 401


# --- POST /users/sync ---


def test_sync_new_user(client: TestClient, principal_headers):
    response = client.post("/users/sync", headers=principal_headers(user_id="new-2"))

    assert response.status_code == 200
    data = response.json()
    assert data["isNewUser"] is True
    assert data["user"]["id"] == "new-2"


def test_sync_existing_user(
    client: TestClient, test_profile: UserProfile, principal_headers
):
    response = client.post("/users/sync", headers=principal_headers())

    assert response.status_code == 200
    data = response.json()
    assert data["isNewUser"] is False
    assert data["user"]["loginCount"] == 1


# --- GET /users/{user_id} ---


def test_public_profile(client: TestClient, test_profile: UserProfile):
    response = client.get("/users/user-123")

    assert response.status_code == 200
    data = response.json()
    assert data["displayName"] == "Jane Doe"
    assert data["location"] == "Austin, TX"
    assert "email" not in data
    assert "status" not in data


def test_public_profile_hides_location(
    client: TestClient, session: Session, test_profile: UserProfile
):
    test_profile.show_location = False
    session.add(test_profile)
    session.commit()

    response = client.get("/users/user-123")

    assert response.status_code == 200
    assert response.json()["location"] is None


def test_public_profile_not_found(client: TestClient):
    response = client.get("/users/nobody")

    assert response.status_code == 404
    assert response.json() == {"type": "user_not_found", "message": "User not found"}
