"""
Tests unitaires pour l'API REST.

Teste la configuration JWT et les endpoints backup.
"""

import importlib
import warnings
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import jwt
import pytest
from fastapi.testclient import TestClient

from calendariko.domain.exceptions import (
    BackupInProgressError,
    DumpToolError,
    InvalidBackupError,
    StorageError,
)
from calendariko.infrastructure.backup.scheduler import BackupScheduler
from calendariko.infrastructure.container import BackupContainer
from calendariko.presentation.api.auth.jwt_service import JWTService
from calendariko.presentation.api.config import APISettings, get_settings
from calendariko.presentation.api.dependencies import get_backup_service
from calendariko.presentation.api.main import create_app

backup_router_module = importlib.import_module("calendariko.presentation.api.backup.router")

SECRET = "test-secret-key"


@pytest.fixture
def api_settings() -> APISettings:
    return APISettings(_env_file=None, jwt_secret_key=SECRET)


@pytest.fixture
def jwt_service(api_settings) -> JWTService:
    return JWTService(api_settings)


@pytest.fixture
def container(backup_settings, audit_repo, backup_service) -> BackupContainer:
    notifier = MagicMock()
    return BackupContainer(
        settings=backup_settings,
        db=MagicMock(),
        audit_repository=audit_repo,
        service=backup_service,
        scheduler=BackupScheduler(backup_service, notifier, backup_settings.scheduler_config),
        notifier=notifier,
    )


@pytest.fixture
def app(container, api_settings):
    application = create_app(container)
    application.dependency_overrides[get_settings] = lambda: api_settings
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_headers(jwt_service) -> dict:
    token = jwt_service.create_access_token("admin-1", "ADMIN")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def artist_headers(jwt_service) -> dict:
    token = jwt_service.create_access_token("artist-1", "ARTIST")
    return {"Authorization": f"Bearer {token}"}


class TestJWTService:
    """Tests pour le service JWT."""

    def test_verify_access_token_valid(self, jwt_service):
        """verify_access_token retourne le payload si valide."""
        token = jwt_service.create_access_token("u-42", "admin")

        payload = jwt_service.verify_access_token(token)

        assert payload is not None
        assert payload.user_id == "u-42"
        assert payload.role == "admin"
        assert payload.token_type == "access"
        assert payload.is_admin is True

    def test_verify_access_token_invalid(self, jwt_service):
        """verify_access_token retourne None si invalide."""
        assert jwt_service.verify_access_token("invalid-token") is None

    def test_wrong_secret(self, jwt_service):
        other = JWTService(APISettings(_env_file=None, jwt_secret_key="other-secret"))
        token = other.create_access_token("u-1", "admin")

        assert jwt_service.verify_access_token(token) is None

    def test_expired_token(self, jwt_service):
        """Un token expire est refuse."""
        token = jwt.encode(
            {
                "sub": "u-1",
                "role": "admin",
                "type": "access",
                "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
            },
            SECRET,
            algorithm="HS256",
        )

        assert jwt_service.verify_access_token(token) is None

    def test_refresh_type_rejected(self, jwt_service):
        """Seuls les access tokens sont acceptes."""
        token = jwt.encode(
            {
                "sub": "u-1",
                "role": "admin",
                "type": "refresh",
                "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            },
            SECRET,
            algorithm="HS256",
        )

        assert jwt_service.verify_access_token(token) is None

    def test_missing_subject_rejected(self, jwt_service):
        """Claim sub obligatoire."""
        token = jwt.encode(
            {"role": "admin", "type": "access", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )

        assert jwt_service.verify_access_token(token) is None

    def test_issuer_checked_when_configured(self, jwt_service):
        """Emetteur configure: les tokens d'un autre emetteur sont refuses."""
        strict = JWTService(APISettings(_env_file=None, jwt_secret_key=SECRET, jwt_issuer="calendariko"))

        assert strict.verify_access_token(jwt_service.create_access_token("u", "admin")) is None
        assert strict.verify_access_token(strict.create_access_token("u", "admin")) is not None

    def test_leeway_accepts_recently_expired(self):
        lenient = JWTService(APISettings(_env_file=None, jwt_secret_key=SECRET, jwt_leeway_seconds=120))

        token = lenient.create_access_token("u", "admin", expires_in=timedelta(seconds=-30))

        assert lenient.verify_access_token(token) is not None

    def test_artist_is_not_admin(self, jwt_service):
        payload = jwt_service.verify_access_token(jwt_service.create_access_token("u", "ARTIST"))

        assert payload.is_admin is False


class TestAPISettings:
    """Tests pour la configuration API."""

    def test_default_values(self):
        settings = APISettings(_env_file=None)

        assert settings.jwt_algorithm == "HS256"
        assert settings.jwt_access_expire_minutes == 30
        assert settings.api_prefix == "/api"
        assert settings.is_production is False


class TestBackupAuthorization:
    """Tests pour la garde administrateur."""

    def test_health_is_public(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_request_id_echoed(self, client):
        """L'identifiant de requete est renvoye, ou genere s'il manque."""
        echoed = client.get("/health", headers={"X-Request-ID": "req-123"})
        generated = client.get("/health")

        assert echoed.headers["x-request-id"] == "req-123"
        assert generated.headers["x-request-id"]

    def test_missing_token(self, client):
        """Sans token: 401."""
        assert client.get("/api/backup/list").status_code == 401

    def test_non_admin(self, client, artist_headers):
        """Role non admin: 403."""
        assert client.get("/api/backup/list", headers=artist_headers).status_code == 403

    def test_container_missing(self, api_settings, admin_headers):
        """Conteneur non initialise: 503."""
        app = create_app(None)
        app.dependency_overrides[get_settings] = lambda: api_settings

        response = TestClient(app).get("/api/backup/list", headers=admin_headers)

        assert response.status_code == 503


class TestBackupEndpoints:
    """Tests pour les endpoints backup."""

    def test_create_and_list(self, client, admin_headers, audit_repo):
        """POST /create retourne 201 puis le backup est liste."""
        response = client.post("/api/backup/create", headers=admin_headers)

        assert response.status_code == 201
        created = response.json()
        assert created["origin"] == "manual"
        assert created["format"] == "sql"
        assert created["size_formatted"].endswith(" MB")

        listing = client.get("/api/backup/list", headers=admin_headers).json()
        assert listing["total"] == 1
        assert listing["items"][0]["id"] == created["id"]
        assert audit_repo.find_by_admin("admin-1")

    def test_stats_and_config(self, client, admin_headers, write_artifact):
        write_artifact(age_days=1)

        stats = client.get("/api/backup/stats", headers=admin_headers).json()
        config = client.get("/api/backup/config", headers=admin_headers).json()

        assert stats["total_count"] == 1
        assert stats["scheduling"]["state"] == "disabled"
        assert config["retention_days"] == 30
        assert config["max_count"] == 50
        assert config["enabled"] is False
        assert config["notification_email"] is None

    def test_verify(self, client, admin_headers, write_artifact, backup_service):
        write_artifact(age_days=1)
        backup_id = backup_service.list_backups()[0].id

        body = client.get(f"/api/backup/{backup_id}/verify", headers=admin_headers).json()

        assert body["valid"] is True
        assert body["format"] == "sql"

    def test_verify_unknown(self, client, admin_headers):
        """Identifiant inconnu: 404 avec code d'erreur."""
        response = client.get("/api/backup/backup_0/verify", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "BACKUP_NOT_FOUND"

    def test_delete(self, client, admin_headers, write_artifact, backup_service):
        path = write_artifact(age_days=1)
        backup_id = backup_service.list_backups()[0].id

        response = client.delete(f"/api/backup/{backup_id}", headers=admin_headers)

        assert response.status_code == 200
        assert path.name in response.json()["message"]
        assert not path.exists()

    def test_cleanup(self, client, admin_headers, write_artifact):
        write_artifact(age_days=1)
        write_artifact(age_days=60)

        body = client.post("/api/backup/cleanup", headers=admin_headers).json()

        assert body["removed"] == 1
        assert body["kept"] == 1

    def test_test_endpoint_notifies(self, client, admin_headers, container):
        response = client.post("/api/backup/test", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["backup"]["origin"] == "auto"
        container.notifier.backup_succeeded.assert_called_once()


class TestRestoreEndpoint:
    """Tests pour POST /{backup_id}/restore."""

    def test_requires_confirmation(self, client, admin_headers, write_artifact, backup_service, native_strategy):
        """Sans confirm_restore: 400 et aucune action."""
        write_artifact(age_days=1)
        backup_id = backup_service.list_backups()[0].id

        no_body = client.post(f"/api/backup/{backup_id}/restore", headers=admin_headers)
        refused = client.post(
            f"/api/backup/{backup_id}/restore",
            headers=admin_headers,
            json={"confirm_restore": False},
        )

        assert no_body.status_code == 400
        assert refused.status_code == 400
        assert native_strategy.restored == []

    def test_confirmed_restore(self, client, admin_headers, write_artifact, backup_service, native_strategy):
        path = write_artifact(age_days=1)
        backup_id = backup_service.list_backups()[0].id

        response = client.post(
            f"/api/backup/{backup_id}/restore",
            headers=admin_headers,
            json={"confirm_restore": True},
        )

        assert response.status_code == 200
        assert response.json()["filename"] == path.name
        assert response.json()["warning"]
        assert native_strategy.restored == [path]

    def test_invalid_backup(self, client, admin_headers, write_artifact, backup_service):
        """Backup invalide: 422."""
        write_artifact(age_days=1, content="-- vide\n")
        backup_id = backup_service.list_backups()[0].id

        response = client.post(
            f"/api/backup/{backup_id}/restore",
            headers=admin_headers,
            json={"confirm_restore": True},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_BACKUP"

    def test_unknown_backup(self, client, admin_headers):
        response = client.post(
            "/api/backup/backup_0/restore",
            headers=admin_headers,
            json={"confirm_restore": True},
        )

        assert response.status_code == 404


class TestErrorMapping:
    """Tests pour la conversion des erreurs du moteur."""

    def _with_service(self, app, service):
        app.dependency_overrides[get_backup_service] = lambda: service
        return TestClient(app)

    def test_in_progress_is_conflict(self, app, admin_headers):
        service = MagicMock()
        service.create_backup.side_effect = BackupInProgressError("create_backup")

        response = self._with_service(app, service).post("/api/backup/create", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "BACKUP_IN_PROGRESS"

    def test_dump_failure_includes_suggestion(self, app, admin_headers):
        """Echec pg_dump: 500 avec suggestion de configuration."""
        service = MagicMock()
        service.create_backup.side_effect = DumpToolError("pg_dump", "not found")

        response = self._with_service(app, service).post("/api/backup/create", headers=admin_headers)

        detail = response.json()["detail"]
        assert response.status_code == 500
        assert detail["error"] == "Erreur lors de la creation du backup"
        assert "pg_dump" in detail["details"]
        assert "DATABASE_URL" in detail["suggestion"]

    def test_storage_error_has_no_suggestion(self, app, admin_headers):
        service = MagicMock()
        service.delete_backup.side_effect = StorageError("/backups", "read-only")

        response = self._with_service(app, service).delete("/api/backup/backup_1", headers=admin_headers)

        assert response.status_code == 500
        assert "suggestion" not in response.json()["detail"]

    def test_router_uses_no_deprecated_status_constant(self):
        """Le module du routeur se charge sans avertissement sur HTTP_422."""
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            importlib.reload(backup_router_module)

        assert not [w for w in caught if "HTTP_422" in str(w.message)]
        assert backup_router_module._ERROR_STATUS[InvalidBackupError] == 422
