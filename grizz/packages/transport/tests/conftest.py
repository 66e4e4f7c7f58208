"""packages/transport 测试配置"""

import pytest
from grizz.core.models import ListIdentity, ListKind


@pytest.fixture
def identity() -> ListIdentity:
    return ListIdentity(owner="test@testing.com", kind=ListKind.SHOPPING, list_key="2026-10-17")
