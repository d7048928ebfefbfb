"""
Unit tests for SessionService.
Uses the in-memory session repository and local storage backend.
"""
from datetime import timedelta
import pytest
from chunked_upload_api.core import config
from chunked_upload_api.core.exceptions import SessionNotFoundException, ValidationException

MIB = 1024 * 1024


class TestInitialize:
    """Test suite for opening upload sessions."""

    def test_initialize_computes_total_chunks(self, session_service):
        result = session_service.initialize("clip.mp4", 3_000_000, "video/mp4", chunk_size=1_000_000)

        assert result.total_chunks == 3
        assert result.chunk_size == 1_000_000
        assert result.upload_id

    def test_initialize_rounds_partial_last_chunk_up(self, session_service):
        result = session_service.initialize("clip.mp4", 2_500_001, "video/mp4", chunk_size=1_000_000)
        assert result.total_chunks == 3

    def test_initialize_defaults_chunk_size(self, session_service):
        result = session_service.initialize("clip.webm", 10 * MIB, "video/webm")

        assert result.chunk_size == 1536 * 1024
        assert result.total_chunks == 7

    def test_initialize_sets_expiry_24_hours_ahead(self, session_service, clock):
        result = session_service.initialize("clip.mp4", 100, "video/mp4")
        assert result.expires_at == clock.now + timedelta(hours=24)

    def test_initialize_generates_unique_ids(self, session_service):
        first = session_service.initialize("clip.mp4", 100, "video/mp4")
        second = session_service.initialize("clip.mp4", 100, "video/mp4")
        assert first.upload_id != second.upload_id

    def test_initialize_persists_empty_session(self, session_service, session_repository):
        result = session_service.initialize("clip.mp4", 100, "video/mp4")

        session = session_repository.get_by_id(result.upload_id)
        assert session.received_chunks == set()
        assert session.storage_prefix == f"chunks/{result.upload_id}"

    @pytest.mark.parametrize("total_size", [0, -1, 500 * MIB + 1])
    def test_initialize_rejects_bad_size(self, session_service, total_size):
        with pytest.raises(ValidationException) as exc_info:
            session_service.initialize("clip.mp4", total_size, "video/mp4")
        assert "file_size" in exc_info.value.message

    def test_initialize_accepts_max_size(self, session_service):
        result = session_service.initialize("big.mp4", 500 * MIB, "video/mp4")
        assert result.total_chunks == 334

    def test_initialize_rejects_disallowed_mime_type(self, session_service):
        with pytest.raises(ValidationException) as exc_info:
            session_service.initialize("notes.pdf", 100, "application/pdf")
        assert "mime_type" in exc_info.value.message

    def test_initialize_rejects_empty_file_name(self, session_service):
        with pytest.raises(ValidationException):
            session_service.initialize("   ", 100, "video/mp4")

    @pytest.mark.parametrize("chunk_size", [0, 1536 * 1024 + 1])
    def test_initialize_rejects_bad_chunk_size(self, session_service, chunk_size):
        with pytest.raises(ValidationException) as exc_info:
            session_service.initialize("clip.mp4", 100, "video/mp4", chunk_size=chunk_size)
        assert "chunk_size" in exc_info.value.message

    def test_rejected_initialize_persists_nothing(self, session_service, session_repository, clock):
        with pytest.raises(ValidationException):
            session_service.initialize("clip.mp4", 0, "video/mp4")
        assert session_repository.list_expired(clock.now + timedelta(days=365)) == []


class TestGetStatus:
    """Test suite for status snapshots."""

    def test_get_status_reports_progress(self, session_service, chunk_service):
        upload = session_service.initialize("clip.mp4", 4000, "video/mp4", chunk_size=1000)
        chunk_service.store_chunk(upload.upload_id, 2, b"c" * 1000)
        chunk_service.store_chunk(upload.upload_id, 0, b"a" * 1000)

        status = session_service.get_status(upload.upload_id)

        assert status.uploaded_chunks == [0, 2]
        assert status.uploaded_count == 2
        assert status.total_chunks == 4
        assert status.progress == 50.0
        assert status.is_complete is False
        assert status.file_name == "clip.mp4"
        assert status.total_size == 4000

    def test_get_status_unknown_upload(self, session_service):
        with pytest.raises(SessionNotFoundException):
            session_service.get_status("6f1c1f8e-4e55-4a36-8f53-2f0b5c2a9d11")

    def test_get_status_malformed_upload_id(self, session_service):
        with pytest.raises(SessionNotFoundException):
            session_service.get_status("../../etc")

    def test_get_status_expired_session(self, session_service, clock):
        upload = session_service.initialize("clip.mp4", 100, "video/mp4")
        clock.advance(hours=24, seconds=1)

        with pytest.raises(SessionNotFoundException):
            session_service.get_status(upload.upload_id)


class TestCancel:
    """Test suite for cancellation."""

    def test_cancel_removes_metadata_and_chunks(self, session_service, chunk_service, storage_root):
        upload = session_service.initialize("clip.mp4", 2000, "video/mp4", chunk_size=1000)
        chunk_service.store_chunk(upload.upload_id, 0, b"a" * 1000)
        assert (storage_root / "chunks" / upload.upload_id).is_dir()

        session_service.cancel(upload.upload_id)

        with pytest.raises(SessionNotFoundException):
            session_service.get_status(upload.upload_id)
        assert not (storage_root / "chunks" / upload.upload_id).exists()

    def test_cancel_uses_recorded_storage_prefix(self, session_service, chunk_service, storage_root, monkeypatch):
        upload = session_service.initialize("clip.mp4", 2000, "video/mp4", chunk_size=1000)
        chunk_service.store_chunk(upload.upload_id, 0, b"a" * 1000)
        monkeypatch.setattr(config.settings, "chunk_prefix", "parts")

        session_service.cancel(upload.upload_id)

        assert not (storage_root / "chunks" / upload.upload_id).exists()

    def test_cancel_is_idempotent(self, session_service):
        upload = session_service.initialize("clip.mp4", 100, "video/mp4")

        session_service.cancel(upload.upload_id)
        session_service.cancel(upload.upload_id)

    def test_cancel_unknown_or_malformed_upload_is_noop(self, session_service, storage_root):
        session_service.cancel("6f1c1f8e-4e55-4a36-8f53-2f0b5c2a9d11")
        session_service.cancel("..")


class TestSweepExpired:
    """Test suite for the expiry sweep."""

    def test_sweep_removes_only_expired_sessions(self, session_service, chunk_service, clock, storage_root):
        old = session_service.initialize("old.mp4", 1000, "video/mp4", chunk_size=1000)
        chunk_service.store_chunk(old.upload_id, 0, b"x" * 1000)
        clock.advance(hours=12)
        fresh = session_service.initialize("fresh.mp4", 1000, "video/mp4", chunk_size=1000)
        clock.advance(hours=12, seconds=1)

        cleaned = session_service.sweep_expired()

        assert cleaned == 1
        assert not (storage_root / "chunks" / old.upload_id).exists()
        with pytest.raises(SessionNotFoundException):
            session_service.get_status(old.upload_id)
        assert session_service.get_status(fresh.upload_id).upload_id == fresh.upload_id

    def test_sweep_with_nothing_expired(self, session_service):
        session_service.initialize("clip.mp4", 100, "video/mp4")
        assert session_service.sweep_expired() == 0

    def test_repeated_sweep_does_not_double_count(self, session_service, clock):
        session_service.initialize("clip.mp4", 100, "video/mp4")
        clock.advance(days=2)

        assert session_service.sweep_expired() == 1
        assert session_service.sweep_expired() == 0

    def test_sweep_honours_configured_ttl(self, session_service, clock, monkeypatch):
        monkeypatch.setattr(config.settings, "upload_session_ttl_hours", 1)
        session_service.initialize("clip.mp4", 100, "video/mp4")
        clock.advance(hours=2)

        assert session_service.sweep_expired() == 1

    def test_sweep_uses_recorded_storage_prefix(self, session_service, chunk_service, clock, storage_root, monkeypatch):
        upload = session_service.initialize("clip.mp4", 1000, "video/mp4", chunk_size=1000)
        chunk_service.store_chunk(upload.upload_id, 0, b"x" * 1000)
        monkeypatch.setattr(config.settings, "chunk_prefix", "parts")
        clock.advance(days=2)

        assert session_service.sweep_expired() == 1
        assert not (storage_root / "chunks" / upload.upload_id).exists()
