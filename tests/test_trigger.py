import logging

import pytest

from xwmission.errors import FieldOutOfRange
from xwmission.platform import Platform
from xwmission.trigger import (
    Condition, ReferenceKind, Trigger, VariableType, check_target, check_trigger, read_trigger,
)


# =============================================================================
# Disk form
# =============================================================================

def test_parse_short_and_long_forms():
    raw = bytes([2, 1, 5, 0, 7, 9])
    assert Trigger.parse(raw) == Trigger(2, 1, 5, 0)
    assert Trigger.parse(raw, size=6) == Trigger(2, 1, 5, 0, 7, 9)
    assert Trigger(2, 1, 5, 0, 7, 9).to_bytes() == raw[:4]
    assert Trigger(2, 1, 5, 0, 7, 9).to_bytes(6) == raw


def test_clear_and_default():
    trigger = Trigger(Condition.DESTROYED, VariableType.FLIGHT_GROUP, 3, 0, 1, 1)
    assert not trigger.is_default
    copy = trigger.copy()
    trigger.clear()
    assert trigger.is_default
    assert copy.variable == 3


# =============================================================================
# Validation
# =============================================================================

def test_tie_condition_limit():
    with pytest.raises(FieldOutOfRange):
        check_trigger(Trigger(condition=25), Platform.TIE)
    check_trigger(Trigger(condition=25), Platform.XVT)


def test_variable_type_limits():
    with pytest.raises(FieldOutOfRange):
        check_trigger(Trigger(variable_type=VariableType.TEAM), Platform.TIE)
    with pytest.raises(FieldOutOfRange):
        check_trigger(Trigger(variable_type=VariableType.MESSAGE), Platform.XVT)
    check_trigger(Trigger(variable_type=VariableType.MESSAGE), Platform.XWA)


def test_tie_status_variable_reverted(caplog):
    trigger = Trigger(Condition.DESTROYED, VariableType.STATUS, 4)
    with caplog.at_level(logging.WARNING):
        check_trigger(trigger, Platform.TIE, "FlightGroup 0 arrival trigger 1")
    assert trigger.variable_type == 0
    assert trigger.variable == 0
    assert "reverted" in caplog.text


@pytest.mark.parametrize("amount, fixed", [(16, 1), (17, 2), (18, 0), (19, 6)])
def test_tie_legacy_amounts(amount, fixed):
    trigger = check_trigger(Trigger(Condition.DESTROYED, VariableType.FLIGHT_GROUP, 0, amount),
                            Platform.TIE)
    assert trigger.amount == fixed


def test_xvt_legacy_amount():
    assert check_trigger(Trigger(amount=19), Platform.XVT).amount == 6
    assert check_trigger(Trigger(amount=17), Platform.XVT).amount == 17


def test_target_value_ranges():
    with pytest.raises(FieldOutOfRange):
        check_target(Platform.TIE, VariableType.IFF, 6, "Order")
    with pytest.raises(FieldOutOfRange):
        check_target(Platform.XVT, VariableType.SHIP_TYPE, 92, "Order")
    with pytest.raises(FieldOutOfRange):
        check_target(Platform.XVT, VariableType.TEAM, 10, "Order")
    check_target(Platform.XWA, VariableType.SHIP_TYPE, 200, "Order")
    check_target(Platform.XWA, VariableType.IFF, 200, "Order")


def test_read_trigger_uses_platform_size():
    raw = bytes([Condition.NEARBY, VariableType.FLIGHT_GROUP, 1, 0, 3, 0])
    trigger = read_trigger(raw, 0, Platform.XWA, "Trigger")
    assert trigger.parameter1 == 3


# =============================================================================
# References
# =============================================================================

def test_flight_group_references():
    trigger = Trigger(Condition.ARRIVED, VariableType.FLIGHT_GROUP, 2)
    assert trigger.references(ReferenceKind.FLIGHT_GROUP, 2)
    assert not trigger.references(ReferenceKind.FLIGHT_GROUP, 1)
    assert not trigger.references(ReferenceKind.MESSAGE, 2)


def test_proximity_parameter_reference():
    trigger = Trigger(Condition.NEARBY, VariableType.IFF, 1, 0, parameter1=4)
    assert trigger.references(ReferenceKind.FLIGHT_GROUP, 3)


def test_remap_moves_and_resets():
    trigger = Trigger(Condition.DESTROYED, VariableType.NOT_FLIGHT_GROUP, 5)
    assert trigger.remap(ReferenceKind.FLIGHT_GROUP, lambda i: i - 1)
    assert trigger.variable == 4
    assert trigger.remap(ReferenceKind.FLIGHT_GROUP, lambda i: None)
    assert trigger.is_default


def test_remap_proximity_parameter():
    trigger = Trigger(Condition.NEARBY, VariableType.IFF, 1, 0, parameter1=3)
    assert trigger.remap(ReferenceKind.FLIGHT_GROUP, lambda i: i + 1)
    assert trigger.parameter1 == 4
    assert trigger.remap(ReferenceKind.FLIGHT_GROUP, lambda i: None)
    assert trigger.parameter1 == 0
    assert trigger.variable_type == VariableType.IFF


def test_remap_ignores_other_kinds():
    trigger = Trigger(Condition.ARRIVED, VariableType.SHIP_TYPE, 2)
    assert not trigger.remap(ReferenceKind.FLIGHT_GROUP, lambda i: None)
    assert trigger.variable == 2
