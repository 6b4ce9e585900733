import dataclasses

import pytest

from metalctl.config.errors import (
    InvalidManagementConfigError,
    ManagementConfigNotFoundError,
    UnknownManagementTypeError,
)
from metalctl.document.errors import DocumentNotFoundError
from metalctl.observers.dispatcher import EventBus
from metalctl.observers.events import ManagerReady
from metalctl.phase.resolver import PhaseNotFoundError, PhaseResolver
from metalctl.remote.errors import NoHostsFoundError
from metalctl.remote.manager import new_manager
from metalctl.remote.selectors import ByLabel, ByName


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


class ExplodingResolver:
    """Fails the test if anything tries to load documents."""
    def bundle(self, phase_name):
        raise AssertionError("documents must not be touched")


def _names(mgr):
    return {h.name for h in mgr.hosts}


def test_label_then_name_yields_single_host(metalctl_config, fake_registry):
    mgr = new_manager(metalctl_config, "phaseX", ByLabel("site=1"), ByName("B"), registry=fake_registry)
    assert _names(mgr) == {"B"}
    assert mgr.hosts[0].bmc_address == "redfish+https://10.0.0.2/redfish/v1/Systems/1"


def test_single_selector_equals_its_match_set(metalctl_config, fake_registry):
    mgr = new_manager(metalctl_config, "phaseX", ByLabel("site=1"), registry=fake_registry)
    assert [h.name for h in mgr.hosts] == ["A", "B"]


def test_selectors_compose_as_intersection(metalctl_config, fake_registry):
    site = new_manager(metalctl_config, "phaseX", ByLabel("site=1"), registry=fake_registry)
    rack = new_manager(metalctl_config, "phaseX", ByLabel("rack=r2"), registry=fake_registry)
    both = new_manager(
        metalctl_config, "phaseX", ByLabel("site=1"), ByLabel("rack=r2"), registry=fake_registry
    )
    assert _names(both) == _names(site) & _names(rack) == {"B"}


def test_every_matched_document_builds_a_client(metalctl_config, fake_registry):
    new_manager(metalctl_config, "phaseX", ByLabel("site=1"), ByName("B"), registry=fake_registry)
    # A and B from the label selector, then B again from the name selector
    assert [c.address.split("/")[2] for c in fake_registry.built] == ["10.0.0.1", "10.0.0.2", "10.0.0.2"]
    assert fake_registry.built[0].username == "admin-a"
    assert fake_registry.built[0].password == "pw-a"


def test_unknown_name_fails_with_document_not_found(metalctl_config, fake_registry):
    with pytest.raises(DocumentNotFoundError) as exc:
        new_manager(metalctl_config, "phaseX", ByName("Z"), registry=fake_registry)
    assert "document not found" in str(exc.value)


def test_unknown_label_fails_with_document_not_found(metalctl_config, fake_registry):
    with pytest.raises(DocumentNotFoundError):
        new_manager(metalctl_config, "phaseX", ByLabel("site=9"), registry=fake_registry)


def test_bogus_type_fails_before_touching_documents(config_factory, fake_registry):
    cfg = config_factory("bogus")
    with pytest.raises(UnknownManagementTypeError) as exc:
        new_manager(
            cfg,
            "phaseX",
            ByLabel("site=1"),
            phase_resolver=ExplodingResolver(),
            registry=fake_registry,
        )
    assert "unknown management type" in str(exc.value)
    assert fake_registry.built == []


def test_negative_retries_rejected_before_selection(config_factory, fake_registry):
    cfg = config_factory(system_action_retries=-1)
    with pytest.raises(InvalidManagementConfigError):
        new_manager(cfg, "phaseX", ByLabel(""), phase_resolver=ExplodingResolver(), registry=fake_registry)


def test_missing_management_config_reference(metalctl_config, fake_registry):
    cfg = metalctl_config.model_copy(update={"management_configuration": {}})
    with pytest.raises(ManagementConfigNotFoundError):
        new_manager(cfg, "phaseX", ByLabel(""), registry=fake_registry)


def test_conflicting_selectors_raise_no_hosts_found(metalctl_config, fake_registry):
    with pytest.raises(NoHostsFoundError) as exc:
        new_manager(metalctl_config, "phaseX", ByLabel("site=1"), ByName("C"), registry=fake_registry)
    assert not isinstance(exc.value, DocumentNotFoundError)
    assert "no hosts found" in str(exc.value)


def test_empty_intersection_is_not_refilled_by_later_selectors(metalctl_config, fake_registry):
    with pytest.raises(NoHostsFoundError):
        new_manager(
            metalctl_config,
            "phaseX",
            ByLabel("site=1"),
            ByName("C"),
            ByName("C"),
            registry=fake_registry,
        )


def test_no_selectors_means_no_hosts(metalctl_config, fake_registry):
    with pytest.raises(NoHostsFoundError):
        new_manager(metalctl_config, "phaseX", registry=fake_registry)


def test_unknown_phase(metalctl_config, fake_registry):
    with pytest.raises(PhaseNotFoundError):
        new_manager(metalctl_config, "nope", ByLabel(""), registry=fake_registry)


def test_manager_ready_event_and_explicit_resolver(metalctl_config, fake_registry):
    cap = Capture()
    resolver = PhaseResolver.from_config(metalctl_config)
    mgr = new_manager(
        metalctl_config,
        "phaseX",
        ByLabel(""),
        phase_resolver=resolver,
        registry=fake_registry,
        bus=EventBus([cap]),
        run_id="run-1",
    )
    assert mgr.host_names() == ["A", "B", "C"]
    ready = [e for e in cap.events if isinstance(e, ManagerReady)]
    assert len(ready) == 1
    assert ready[0].hosts == ["A", "B", "C"]
    assert ready[0].management_type == "fake"
    assert ready[0].run_id == "run-1"
    assert ready[0].phase == "phaseX"


def test_manager_is_frozen(metalctl_config, fake_registry):
    mgr = new_manager(metalctl_config, "phaseX", ByName("A"), registry=fake_registry)
    with pytest.raises(dataclasses.FrozenInstanceError):
        mgr.hosts = ()
