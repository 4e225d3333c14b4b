import copy

import pytest

import layerzero_oapp.core.config as oapp_config
from layerzero_oapp.core.utils.web3 import _clear_rate_limit_cooldowns


def pytest_configure(config):
    config.addinivalue_line("markers", "smoke: mark test as a smoke test")
    config.addinivalue_line("markers", "integration: mark test as integration")


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "smoke" in item.nodeid:
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def isolated_config():
    """Each test starts from a known config with one fake RPC per chain."""
    original = copy.deepcopy(oapp_config.CONFIG)
    oapp_config.set_config(
        {
            "rpc_urls": {
                "1": ["https://rpc-1.invalid"],
                "42161": ["https://arb-1.invalid", "https://arb-2.invalid"],
                "8453": ["https://base-1.invalid"],
            },
            "oapp": {"42161": "0x1111111111111111111111111111111111111111"},
        }
    )
    _clear_rate_limit_cooldowns()
    yield
    _clear_rate_limit_cooldowns()
    oapp_config.set_config(original)
