import pytest

from resequil import FluidPhase, PhaseUsage, ValidationError


def test_positions_follow_water_oil_gas_order():
    usage = PhaseUsage()
    assert usage.num_phases == 3
    assert [usage.position(phase) for phase in usage.active_phases] == [0, 1, 2]
    assert usage.position(FluidPhase.GAS) == 2


def test_gas_oil_positions():
    usage = PhaseUsage(water=False)
    assert usage.active_phases == (FluidPhase.OIL, FluidPhase.GAS)
    assert usage.position(FluidPhase.OIL) == 0
    assert usage.position(FluidPhase.GAS) == 1


def test_from_phases():
    usage = PhaseUsage.from_phases(["oil", FluidPhase.WATER])
    assert usage == PhaseUsage(water=True, oil=True, gas=False)


def test_inactive_phase_has_no_position():
    with pytest.raises(ValidationError, match="not active"):
        PhaseUsage(gas=False).position(FluidPhase.GAS)


def test_no_active_phase_is_rejected():
    with pytest.raises(ValidationError):
        PhaseUsage(water=False, oil=False, gas=False)


def test_unknown_phase_name():
    with pytest.raises(ValidationError, match="Unknown fluid phase"):
        PhaseUsage.from_phases(["oil", "solvent"])
