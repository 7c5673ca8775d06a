"""
Tests for the GenericOperand state machine
"""

# Standard
import copy

# Third Party
import pytest

# Local
from hco_operands import constants
from hco_operands.exceptions import (
    ClusterOperationError,
    ConflictError,
    EnvDecodeError,
    PatchError,
)
from hco_operands.operands import (
    ChangeOutcome,
    EnsureResult,
    GenericOperand,
    OperandDescriptor,
    OperandKind,
)
from hco_operands.operands.kubevirt import KubeVirtHooks, new_kubevirt
from hco_operands.test_helpers.helpers import (
    TEST_ENV,
    TEST_INSTANCE_UID,
    TEST_KUBEVIRT_VERSION,
    TEST_NAMESPACE,
    MockClusterClient,
    setup_request,
)

## Helpers #####################################################################

KV_NAME = "kubevirt-kubevirt-hyperconverged"

READY_CONDITIONS = [
    {"type": "Available", "status": "True", "reason": "", "message": ""},
    {"type": "Progressing", "status": "False", "reason": "", "message": ""},
    {"type": "Degraded", "status": "False", "reason": "", "message": ""},
]


def make_operand(kind, client):
    return GenericOperand(client, kind.descriptor, kind.make_hooks())


def stored_kubevirt(client):
    return client.get_obj(
        constants.KUBEVIRT_API_VERSION, constants.KUBEVIRT_KIND, KV_NAME, TEST_NAMESPACE
    )


def set_kubevirt_status(client, status):
    """Simulate the KubeVirt operator reporting its status"""
    stored = stored_kubevirt(client)
    stored["status"] = status
    client.update(stored)
    client.reset_mocks()


## EnsureResult ################################################################


@pytest.mark.parametrize(
    "kwargs,outcome",
    [
        ({}, ChangeOutcome.UNCHANGED),
        ({"created": True}, ChangeOutcome.CREATED),
        ({"updated": True}, ChangeOutcome.UPDATED_BY_US),
        ({"updated": True, "overwritten": True}, ChangeOutcome.UPDATED_EXTERNALLY_CORRECTED),
        ({"updated": True, "err": ValueError()}, ChangeOutcome.ERROR),
    ],
)
def test_ensure_result_outcome(kwargs, outcome):
    assert EnsureResult(kind="KubeVirt", **kwargs).outcome == outcome


## Create ######################################################################


@pytest.mark.parametrize("kind", list(OperandKind))
def test_create_when_absent(kind):
    """Make sure every kind is created when it doesn't exist"""
    client = MockClusterClient()
    result = make_operand(kind, client).ensure(setup_request())
    assert result.outcome == ChangeOutcome.CREATED
    assert result.err is None
    client.create.assert_called_once()
    client.update.assert_not_called()


def test_create_sets_owner_reference():
    """Make sure the KubeVirt CR is created with the parent as controller and
    the cached desired object is left alone
    """
    client = MockClusterClient()
    req = setup_request()
    make_operand(OperandKind.KUBEVIRT, client).ensure(req)

    owner_refs = stored_kubevirt(client)["metadata"]["ownerReferences"]
    assert len(owner_refs) == 1
    assert owner_refs[0]["uid"] == TEST_INSTANCE_UID
    assert owner_refs[0]["kind"] == "HyperConverged"
    assert owner_refs[0]["controller"] is True
    assert "ownerReferences" not in req.cache.get("KubeVirt")["metadata"]


def test_create_failure():
    """Make sure a failed create is an error outcome and not retried"""
    client = MockClusterClient(create_fail=ClusterOperationError("nope"))
    result = make_operand(OperandKind.KUBEVIRT_CONFIG, client).ensure(setup_request())
    assert result.outcome == ChangeOutcome.ERROR
    assert isinstance(result.err, ClusterOperationError)
    client.create.assert_called_once()


def test_get_failure():
    """Make sure a lookup error other than not found is surfaced"""
    client = MockClusterClient(get_fail=ConflictError("throttled"))
    result = make_operand(OperandKind.KUBEVIRT, client).ensure(setup_request())
    assert isinstance(result.err, ConflictError)
    client.create.assert_not_called()


## Build errors ################################################################


def test_build_error_stops_before_the_cluster():
    """Make sure an invalid env override fails with no cluster calls"""
    client = MockClusterClient()
    req = setup_request(env=dict(TEST_ENV, KVM_EMULATION="maybe"))
    result = make_operand(OperandKind.KUBEVIRT, client).ensure(req)
    assert isinstance(result.err, EnvDecodeError)
    assert result.err.is_fatal_error
    client.get.assert_not_called()
    client.create.assert_not_called()
    assert "KubeVirt" not in req.cache


def test_patch_error_is_a_build_error():
    client = MockClusterClient()
    req = setup_request(
        annotations={constants.JSON_PATCH_KV_ANNOTATION_NAME: "not json"}
    )
    result = make_operand(OperandKind.KUBEVIRT, client).ensure(req)
    assert isinstance(result.err, PatchError)
    client.get.assert_not_called()


## Found #######################################################################


@pytest.mark.parametrize("kind", list(OperandKind))
def test_idempotent(kind):
    """Make sure a second pass over a converged object is unchanged"""
    client = MockClusterClient()
    operand = make_operand(kind, client)
    assert operand.ensure(setup_request()).outcome == ChangeOutcome.CREATED
    client.reset_mocks()

    result = operand.ensure(setup_request())
    assert result.outcome == ChangeOutcome.UNCHANGED
    client.create.assert_not_called()
    client.update.assert_not_called()
    client.delete.assert_not_called()


@pytest.mark.parametrize(
    "hco_triggered,outcome",
    [
        (True, ChangeOutcome.UPDATED_BY_US),
        (False, ChangeOutcome.UPDATED_EXTERNALLY_CORRECTED),
    ],
)
def test_drift_outcome(hco_triggered, outcome):
    req = setup_request()
    modified = new_kubevirt(req.instance, env=req.env)
    modified["spec"]["uninstallStrategy"] = "RemoveWorkloads"
    client = MockClusterClient(resources=[modified])
    result = make_operand(OperandKind.KUBEVIRT, client).ensure(
        setup_request(hco_triggered=hco_triggered)
    )
    assert result.outcome == outcome
    assert stored_kubevirt(client)["spec"]["uninstallStrategy"] == (
        "BlockUninstallIfWorkloadsExist"
    )


def test_update_conflict_is_surfaced():
    """Make sure an optimistic concurrency failure is an error outcome"""
    req = setup_request()
    modified = new_kubevirt(req.instance, env=req.env)
    modified["spec"]["uninstallStrategy"] = "RemoveWorkloads"
    client = MockClusterClient(resources=[modified], update_fail=ConflictError)
    result = make_operand(OperandKind.KUBEVIRT, client).ensure(req)
    assert result.outcome == ChangeOutcome.ERROR
    assert not result.err.is_fatal_error


def test_remove_existing_owner():
    """Make sure existing owners are stripped for kinds that request it"""
    req = setup_request()
    existing = KubeVirtHooks().get_full_cr(req)
    existing = copy.deepcopy(existing)
    existing["metadata"]["ownerReferences"] = [
        {"apiVersion": "v1", "kind": "Foo", "name": "foo", "uid": "1"}
    ]
    client = MockClusterClient(resources=[existing])
    descriptor = OperandDescriptor(kind="KubeVirt", remove_existing_owner=True)
    result = GenericOperand(client, descriptor, KubeVirtHooks()).ensure(
        setup_request()
    )
    assert result.outcome == ChangeOutcome.UPDATED_BY_US
    assert stored_kubevirt(client)["metadata"]["ownerReferences"] == []


## Conditions and upgrade ######################################################


def test_primary_without_conditions():
    """Make sure a KubeVirt CR with no conditions is reported as not ready"""
    client = MockClusterClient()
    operand = make_operand(OperandKind.KUBEVIRT, client)
    operand.ensure(setup_request())

    req = setup_request(upgrade_mode=True)
    result = operand.ensure(req)
    assert result.outcome == ChangeOutcome.UNCHANGED
    assert not result.upgrade_done
    assert req.conditions.is_status("Available", "False")
    assert req.conditions.get("Available")["reason"] == "KubeVirtConditions"
    assert req.conditions.is_status("Progressing", "True")
    assert req.conditions.is_status("Upgradeable", "False")


def test_primary_upgrade_done():
    """Make sure the upgrade is done once KubeVirt is ready with the expected
    version
    """
    client = MockClusterClient()
    operand = make_operand(OperandKind.KUBEVIRT, client)
    operand.ensure(setup_request())
    set_kubevirt_status(
        client,
        {
            "conditions": READY_CONDITIONS,
            "observedKubeVirtVersion": TEST_KUBEVIRT_VERSION,
        },
    )

    req = setup_request(upgrade_mode=True)
    result = operand.ensure(req)
    assert result.outcome == ChangeOutcome.UNCHANGED
    assert result.upgrade_done
    assert len(req.conditions) == 0

    # Not in upgrade mode, the upgrade is never reported done
    assert not operand.ensure(setup_request(upgrade_mode=False)).upgrade_done


def test_primary_old_version_not_done():
    client = MockClusterClient()
    operand = make_operand(OperandKind.KUBEVIRT, client)
    operand.ensure(setup_request())
    set_kubevirt_status(
        client,
        {"conditions": READY_CONDITIONS, "observedKubeVirtVersion": "v0.0.1"},
    )
    assert not operand.ensure(setup_request(upgrade_mode=True)).upgrade_done


def test_primary_degraded():
    client = MockClusterClient()
    operand = make_operand(OperandKind.KUBEVIRT, client)
    operand.ensure(setup_request())
    conditions = copy.deepcopy(READY_CONDITIONS)
    conditions[2]["status"] = "True"
    conditions[2]["message"] = "virt-handler is down"
    set_kubevirt_status(
        client,
        {"conditions": conditions, "observedKubeVirtVersion": TEST_KUBEVIRT_VERSION},
    )

    req = setup_request(upgrade_mode=True)
    assert not operand.ensure(req).upgrade_done
    degraded = req.conditions.get("Degraded")
    assert degraded["status"] == "True"
    assert degraded["reason"] == "KubeVirtDegraded"


@pytest.mark.parametrize("upgrade_mode", [True, False])
def test_non_primary_upgrade_done(upgrade_mode):
    """Make sure an unchanged auxiliary kind is done whenever upgrading"""
    client = MockClusterClient()
    operand = make_operand(OperandKind.KUBEVIRT_PRIORITY_CLASS, client)
    operand.ensure(setup_request())
    req = setup_request(upgrade_mode=upgrade_mode)
    assert operand.ensure(req).upgrade_done == upgrade_mode
    assert len(req.conditions) == 0
