from unittest.mock import AsyncMock, MagicMock

import pytest

from src.adapter.services.local_store import InMemoryLocalStore


def _repository(*methods):
    repo = MagicMock()
    for method in methods:
        setattr(repo, method, AsyncMock())
    return repo


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.profiles = _repository("get_by_id", "get_by_email", "create", "update")
    uow.tenants = _repository("get_by_id", "get_by_slug", "get_by_ids", "create")
    uow.memberships = _repository("get_by_user_and_tenant", "get_by_user_id", "create")
    uow.notifications = _repository(
        "get_by_id",
        "list_for_recipient",
        "count_unread",
        "list_unacknowledged",
        "list_unresolved",
        "list_archivable",
        "create",
        "update",
    )
    uow.escalation_rules = _repository("list_all", "list_active", "get_by_scope", "save")
    uow.escalation_events = _repository(
        "get_by_id", "get_by_notification_ids", "list_events", "create", "update"
    )
    uow.audit_events = _repository("create", "list_paginated")
    uow.token_records = _repository("exists", "create", "delete_expired")
    return uow


@pytest.fixture
def uow_factory(mock_uow):
    return lambda: mock_uow


@pytest.fixture
def local_store():
    return InMemoryLocalStore()
