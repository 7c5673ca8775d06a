"""
Tests for the OperandsReconciler and the per-pass helpers
"""

# Standard
from unittest import mock
import json
import logging

# Third Party
import pytest

# Local
from hco_operands import reconcile
from hco_operands.exceptions import ClusterOperationError
from hco_operands.log_format import HcoJsonFormatter
from hco_operands.operands import ChangeOutcome, OperandKind
from hco_operands.reconcile import OperandsReconciler, generate_id
from hco_operands.test_helpers.helpers import (
    TEST_ENV,
    TEST_NAMESPACE,
    MockClusterClient,
    library_config,
    setup_hc,
    setup_request,
)

## OperandsReconciler ##########################################################


def test_first_pass_creates_everything():
    """Make sure the first pass creates every operand in order and asks for a
    requeue
    """
    client = MockClusterClient()
    result = OperandsReconciler(client).ensure(setup_request())
    assert result.err is None
    assert [res.kind for res in result.results] == [
        "KubeVirtConfig",
        "KubeVirtPriorityClass",
        "KubeVirt",
    ]
    assert [res.kind for res in result.results] == [kind.value for kind in OperandKind]
    assert all(res.outcome == ChangeOutcome.CREATED for res in result.results)
    assert result.updated
    assert not result.overwritten
    assert result.requeue
    assert client.has_obj("v1", "ConfigMap", "kubevirt-config", TEST_NAMESPACE)
    assert client.has_obj(
        "scheduling.k8s.io/v1", "PriorityClass", "kubevirt-cluster-critical"
    )
    assert client.has_obj(
        "kubevirt.io/v1", "KubeVirt", "kubevirt-kubevirt-hyperconverged", TEST_NAMESPACE
    )


def test_second_pass_is_unchanged():
    """Make sure a converged cluster needs no further changes"""
    client = MockClusterClient()
    reconciler = OperandsReconciler(client)
    reconciler.ensure(setup_request())
    client.reset_mocks()

    result = reconciler.ensure(setup_request())
    assert result.err is None
    assert all(res.outcome == ChangeOutcome.UNCHANGED for res in result.results)
    assert not result.requeue
    client.create.assert_not_called()
    client.update.assert_not_called()
    client.delete.assert_not_called()

    # KubeVirt reports no conditions yet
    types = {cond["type"] for cond in result.conditions}
    assert types == {"Available", "Progressing", "Upgradeable"}


def test_stops_at_first_error():
    """Make sure the kinds after a failed kind are not run"""
    client = MockClusterClient(
        create_fail=ClusterOperationError("create failed"),
    )
    result = OperandsReconciler(client).ensure(setup_request())
    assert isinstance(result.err, ClusterOperationError)
    assert len(result.results) == 1
    assert result.results[0].kind == "KubeVirtConfig"
    assert result.requeue
    assert not result.upgrade_done


def test_build_error_stops_the_pass():
    client = MockClusterClient()
    req = setup_request(env=dict(TEST_ENV, KVM_EMULATION="perhaps"))
    result = OperandsReconciler(client).ensure(req)
    assert result.results[-1].kind == "KubeVirt"
    assert result.results[-1].outcome == ChangeOutcome.ERROR
    assert result.err.is_fatal_error


def test_upgrade_not_done_until_kubevirt_ready():
    client = MockClusterClient()
    reconciler = OperandsReconciler(client)
    reconciler.ensure(setup_request(upgrade_mode=True))
    result = reconciler.ensure(setup_request(upgrade_mode=True))
    assert not result.upgrade_done
    assert [res.upgrade_done for res in result.results] == [True, True, False]


def test_externally_modified_priority_class():
    """Make sure an external edit of the priority class is corrected and
    reported as overwritten
    """
    client = MockClusterClient()
    reconciler = OperandsReconciler(client)
    reconciler.ensure(setup_request())

    stored = client.get_obj(
        "scheduling.k8s.io/v1", "PriorityClass", "kubevirt-cluster-critical"
    )
    stored["value"] = 5
    client.update(stored)
    client.reset_mocks()

    result = reconciler.ensure(setup_request(hco_triggered=False))
    assert result.err is None
    assert result.overwritten
    assert (
        result.results[1].outcome == ChangeOutcome.UPDATED_EXTERNALLY_CORRECTED
    )
    client.update.assert_not_called()
    client.delete.assert_called_once()


def test_reconciler_has_one_operand_per_kind():
    reconciler = OperandsReconciler(MockClusterClient())
    assert [operand.descriptor for operand in reconciler.operands] == [
        kind.descriptor for kind in OperandKind
    ]


## Helpers #####################################################################


def test_generate_id():
    first = generate_id()
    assert len(first) == 22
    assert first != generate_id()


@pytest.mark.parametrize("log_json", [True, False])
def test_configure_logging(log_json):
    """Make sure the json formatter is installed only when configured"""
    with library_config(log_json=log_json):
        with mock.patch("alog.configure") as configure_mock:
            reconcile.configure_logging(setup_hc(), "abc", upgrade_mode=True)
    configure_mock.assert_called_once()
    formatter = configure_mock.call_args.kwargs["formatter"]
    if log_json:
        assert isinstance(formatter, HcoJsonFormatter)
        assert formatter.reconciliation_id == "abc"
    else:
        assert formatter == "pretty"


def test_json_formatter_fields():
    """Make sure the parent identity ends up on the record"""
    formatter = HcoJsonFormatter(
        setup_hc().to_dict(), reconciliation_id="abc", upgrade_mode=False
    )
    record = logging.LogRecord("TEST", logging.INFO, __file__, 1, "hi", None, None)
    formatted = json.loads(formatter.format(record))
    assert formatted["reconciliationId"] == "abc"
    assert formatted["parentNamespace"] == TEST_NAMESPACE
    assert formatted["parentName"] == "kubevirt-hyperconverged"
