import math

import pytest

from resequil import ConfigurationError, EquilibrationRecord, build_equilibration_records


def test_record_from_row_defaults_gas_oil_capillary_pressure():
    record = EquilibrationRecord.from_row([2000.0, 200e5, 2200.0, 1e4, 1900.0])
    assert record.datum_depth == 2000.0
    assert record.datum_pressure == 200e5
    assert record.water_oil_contact_depth == 2200.0
    assert record.water_oil_capillary_pressure == 1e4
    assert record.gas_oil_contact_depth == 1900.0
    assert record.gas_oil_capillary_pressure == 0.0


def test_record_from_full_row():
    record = EquilibrationRecord.from_row([2000, 200e5, 2200, 0, 1900, 5e3])
    assert record.gas_oil_capillary_pressure == 5e3
    assert isinstance(record.datum_depth, float)


@pytest.mark.parametrize("row", [[2000.0, 200e5, 2200.0, 0.0], list(range(7))])
def test_record_row_length(row):
    with pytest.raises(ConfigurationError, match="5 or 6 values"):
        EquilibrationRecord.from_row(row)


@pytest.mark.parametrize(
    "goc, datum, woc",
    [
        (2100.0, 2000.0, 2200.0),  # datum above the gas-oil contact
        (1900.0, 2300.0, 2200.0),  # datum below the water-oil contact
    ],
)
def test_datum_outside_oil_zone_is_fatal(goc, datum, woc):
    with pytest.raises(ConfigurationError, match="datum depth must be in the oil zone"):
        EquilibrationRecord(
            datum_depth=datum,
            datum_pressure=200e5,
            water_oil_contact_depth=woc,
            gas_oil_contact_depth=goc,
        )


def test_datum_on_contacts_is_allowed():
    record = EquilibrationRecord(
        datum_depth=2000.0,
        datum_pressure=200e5,
        water_oil_contact_depth=2000.0,
        gas_oil_contact_depth=2000.0,
    )
    assert record.datum_depth == 2000.0


def test_non_finite_record_is_rejected():
    with pytest.raises(ConfigurationError, match="finite"):
        EquilibrationRecord(
            datum_depth=2000.0,
            datum_pressure=math.nan,
            water_oil_contact_depth=2200.0,
            gas_oil_contact_depth=1900.0,
        )


@pytest.mark.parametrize("rows", [None, []])
def test_missing_equilibration_data(rows):
    with pytest.raises(ConfigurationError, match="No equilibration data"):
        build_equilibration_records(rows)


def test_records_must_cover_all_regions():
    with pytest.raises(ConfigurationError, match="covers 1 region"):
        build_equilibration_records([[2000.0, 200e5, 2200.0, 0.0, 1900.0]], num_regions=2)


def test_extra_records_are_ignored(record):
    rows = [record, [2500.0, 250e5, 2600.0, 0.0, 2400.0]]
    records = build_equilibration_records(rows, num_regions=1)
    assert records == [record]


def test_malformed_row_names_region():
    with pytest.raises(ConfigurationError, match="region 1"):
        build_equilibration_records(
            [[2000.0, 200e5, 2200.0, 0.0, 1900.0], [2000.0, 200e5, 1900.0, 0.0, 1800.0]]
        )
