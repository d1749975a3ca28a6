"""Per-region equilibration records (datum and contact depths/pressures)."""

import logging
import math
import typing

import attrs

from resequil.errors import ConfigurationError


logger = logging.getLogger(__name__)

__all__ = ["EquilibrationRecord", "build_equilibration_records"]


@attrs.frozen(slots=True)
class EquilibrationRecord:
    """
    Equilibration data for one region, in the spirit of an ECLIPSE `EQUIL` record.

    Depths are measured positive downward. The datum must lie in the oil zone,
    i.e. `gas_oil_contact_depth <= datum_depth <= water_oil_contact_depth`.
    """

    datum_depth: float = attrs.field(converter=float)
    """Depth at which the oil pressure is specified (m)."""
    datum_pressure: float = attrs.field(converter=float)
    """Oil phase pressure at the datum depth (Pa)."""
    water_oil_contact_depth: float = attrs.field(converter=float)
    """Depth of the water-oil contact (m)."""
    gas_oil_contact_depth: float = attrs.field(converter=float)
    """Depth of the gas-oil contact (m)."""
    water_oil_capillary_pressure: float = attrs.field(default=0.0, converter=float)
    """Oil-water capillary pressure Pcow = Po - Pw at the water-oil contact (Pa)."""
    gas_oil_capillary_pressure: float = attrs.field(default=0.0, converter=float)
    """Gas-oil capillary pressure Pcgo = Pg - Po at the gas-oil contact (Pa)."""

    def __attrs_post_init__(self) -> None:
        for field in attrs.fields(type(self)):
            value = getattr(self, field.name)
            if not math.isfinite(value):
                raise ConfigurationError(
                    f"Equilibration record field '{field.name}' must be finite, got {value}."
                )

        if (self.gas_oil_contact_depth > self.datum_depth) or (
            self.datum_depth > self.water_oil_contact_depth
        ):
            raise ConfigurationError(
                "Cannot initialise: the datum depth must be in the oil zone. "
                f"Got GOC={self.gas_oil_contact_depth}, datum={self.datum_depth}, "
                f"WOC={self.water_oil_contact_depth}."
            )

    @classmethod
    def from_row(cls, row: typing.Sequence[float]) -> "EquilibrationRecord":
        """
        Build a record from an EQUIL-style row.

        The row layout is `(datum_depth, datum_pressure, water_oil_contact_depth,
        water_oil_capillary_pressure, gas_oil_contact_depth, gas_oil_capillary_pressure)`.
        The gas-oil capillary pressure may be omitted and defaults to zero.

        :param row: Sequence of five or six numbers.
        :return: Validated `EquilibrationRecord`.
        :raises ConfigurationError: If the row is too short or too long.
        """
        values = list(row)
        if not 5 <= len(values) <= 6:
            raise ConfigurationError(
                f"Equilibration row must have 5 or 6 values, got {len(values)}: {values!r}"
            )
        if len(values) == 5:
            values.append(0.0)

        (
            datum_depth,
            datum_pressure,
            water_oil_contact_depth,
            water_oil_capillary_pressure,
            gas_oil_contact_depth,
            gas_oil_capillary_pressure,
        ) = values
        return cls(
            datum_depth=datum_depth,
            datum_pressure=datum_pressure,
            water_oil_contact_depth=water_oil_contact_depth,
            water_oil_capillary_pressure=water_oil_capillary_pressure,
            gas_oil_contact_depth=gas_oil_contact_depth,
            gas_oil_capillary_pressure=gas_oil_capillary_pressure,
        )


def build_equilibration_records(
    rows: typing.Optional[
        typing.Iterable[typing.Union[EquilibrationRecord, typing.Sequence[float]]]
    ],
    num_regions: typing.Optional[int] = None,
) -> typing.List[EquilibrationRecord]:
    """
    Convert equilibration rows into validated records, one per region.

    :param rows: Records or EQUIL-style rows, ordered by region id.
    :param num_regions: Number of equilibration regions that must be covered.
        When given, fewer rows than regions is an error. Extra rows are ignored.
    :return: List of `EquilibrationRecord`.
    :raises ConfigurationError: If no equilibration data is provided, a row is
        malformed, or regions are left without a record.
    """
    if rows is None:
        raise ConfigurationError("No equilibration data provided.")

    records = []
    for index, row in enumerate(rows):
        if isinstance(row, EquilibrationRecord):
            records.append(row)
            continue
        try:
            records.append(EquilibrationRecord.from_row(row))
        except ConfigurationError as exc:
            raise ConfigurationError(
                f"Invalid equilibration record for region {index}: {exc}"
            ) from exc

    if not records:
        raise ConfigurationError("No equilibration data provided.")

    if num_regions is not None:
        if len(records) < num_regions:
            raise ConfigurationError(
                f"Equilibration data covers {len(records)} region(s) "
                f"but the region mapping has {num_regions}."
            )
        if len(records) > num_regions:
            logger.debug(
                f"Ignoring {len(records) - num_regions} unused equilibration record(s)."
            )
            records = records[:num_regions]
    return records
