import base64
import textwrap
from pathlib import Path

import pytest

from metalctl.config.models import (
    Context,
    ManagementConfiguration,
    Manifest,
    MetalctlConfig,
)
from metalctl.remote.client import PowerStatus
from metalctl.remote.host import BaremetalHost
from metalctl.remote.registry import ClientRegistry


def _b64(s: str) -> str:
    return base64.b64encode(s.encode()).decode()


PHASES_YAML = textwrap.dedent("""
    apiVersion: metalctl.io/v1alpha1
    kind: Phase
    metadata:
      name: phaseX
    config:
      documentEntryPoint: phaseX
    ---
    apiVersion: metalctl.io/v1alpha1
    kind: Phase
    metadata:
      name: remotedirect-ephemeral
    config:
      documentEntryPoint: ephemeral
    ---
    apiVersion: metalctl.io/v1alpha1
    kind: Phase
    metadata:
      name: broken
    config: {}
""")


def _host(name: str, labels: dict, address: str, secret: str) -> str:
    label_lines = "".join(f"\n        {k}: \"{v}\"" for k, v in labels.items()) or " {}"
    return textwrap.dedent(f"""
    apiVersion: metal3.io/v1alpha1
    kind: BareMetalHost
    metadata:
      name: {name}
      namespace: metal
      labels:{label_lines}
    spec:
      bmc:
        address: {address}
        credentialsName: {secret}
    """)


def _secret(name: str, username: str, password: str) -> str:
    return textwrap.dedent(f"""
    apiVersion: v1
    kind: Secret
    metadata:
      name: {name}
      namespace: metal
    data:
      username: {_b64(username)}
      password: {_b64(password)}
    """)


@pytest.fixture
def manifest_root(tmp_path: Path) -> Path:
    """
    Three BareMetalHosts A, B, C; label site=1 on A and B.
    """
    root = tmp_path / "manifests"
    (root / "phases").mkdir(parents=True)
    (root / "phases" / "phases.yaml").write_text(PHASES_YAML)

    hosts_dir = root / "site" / "phaseX"
    hosts_dir.mkdir(parents=True)
    docs = [
        _host("A", {"site": "1", "rack": "r1"}, "redfish+https://10.0.0.1/redfish/v1/Systems/1", "a-bmc"),
        _host("B", {"site": "1", "rack": "r2"}, "redfish+https://10.0.0.2/redfish/v1/Systems/1", "b-bmc"),
        _host("C", {"site": "2", "rack": "r2"}, "redfish+https://10.0.0.3/redfish/v1/Systems/1", "c-bmc"),
        _secret("a-bmc", "admin-a", "pw-a"),
        _secret("b-bmc", "admin-b", "pw-b"),
        _secret("c-bmc", "admin-c", "pw-c"),
    ]
    (hosts_dir / "hosts.yaml").write_text("---".join(docs))

    eph_dir = root / "site" / "ephemeral"
    eph_dir.mkdir(parents=True)
    (eph_dir / "hosts.yaml").write_text(
        "---".join(
            [
                _host(
                    "eph",
                    {"metalctl.io/ephemeral-node": "true"},
                    "redfish+https://10.0.0.9/redfish/v1/Systems/1",
                    "eph-bmc",
                ),
                _secret("eph-bmc", "root", "calvin"),
            ]
        )
    )
    return root


def make_config(manifest_root: Path, mgmt_type: str = "fake", **mgmt) -> MetalctlConfig:
    return MetalctlConfig(
        current_context="test",
        contexts={"test": Context(manifest="default", management_configuration="default")},
        manifests={
            "default": Manifest(
                target_path=str(manifest_root),
                phases_path="phases",
                doc_entry_point_prefix="site",
            )
        },
        management_configuration={
            "default": ManagementConfiguration(
                type=mgmt_type,
                system_action_retries=mgmt.get("system_action_retries", 2),
                system_reboot_delay=mgmt.get("system_reboot_delay", 0),
            )
        },
    )


@pytest.fixture
def metalctl_config(manifest_root: Path) -> MetalctlConfig:
    return make_config(manifest_root)


class FakeClient:
    """Records every call; set ``fail_with`` to make operations raise."""

    def __init__(self, address, *, insecure, use_proxy, username, password,
                 system_action_retries, system_reboot_delay):
        self.address = address
        self.username = username
        self.password = password
        self.retries = system_action_retries
        self.delay = system_reboot_delay
        self.calls = []
        self.fail_with = None
        self.status = PowerStatus.ON

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if self.fail_with is not None:
            raise self.fail_with

    def node_id(self):
        return self.address.rsplit("/", 1)[-1]

    def power_on(self, ctx):
        self._record("power_on")

    def power_off(self, ctx):
        self._record("power_off")

    def power_status(self, ctx):
        self._record("power_status")
        return self.status

    def reboot_system(self, ctx):
        self._record("reboot_system")

    def set_boot_source_by_type(self, ctx):
        self._record("set_boot_source_by_type")

    def set_virtual_media(self, ctx, media_ref):
        self._record("set_virtual_media", media_ref)

    def eject_virtual_media(self, ctx):
        self._record("eject_virtual_media")


class RecordingRegistry(ClientRegistry):
    def __init__(self):
        super().__init__()
        self.built = []
        self.failures = {}  # address -> exception raised by every call
        self.register("fake", self._build)

    def _build(self, address, **kwargs):
        client = FakeClient(address, **kwargs)
        client.fail_with = self.failures.get(address)
        self.built.append(client)
        return client


@pytest.fixture
def fake_registry() -> RecordingRegistry:
    return RecordingRegistry()


@pytest.fixture
def config_factory(manifest_root: Path):
    def factory(mgmt_type: str = "fake", **mgmt) -> MetalctlConfig:
        return make_config(manifest_root, mgmt_type, **mgmt)
    return factory


@pytest.fixture
def make_host():
    """Build a BaremetalHost around a FakeClient; keyword args set client attributes."""
    def factory(name: str, **client_attrs) -> BaremetalHost:
        client = FakeClient(
            f"redfish+https://{name}/redfish/v1/Systems/1",
            insecure=False,
            use_proxy=False,
            username="u",
            password="p",
            system_action_retries=0,
            system_reboot_delay=0,
        )
        for k, v in client_attrs.items():
            setattr(client, k, v)
        return BaremetalHost(name=name, bmc_address=client.address, client=client)
    return factory
