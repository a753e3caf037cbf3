from collections import namedtuple
from enum import Enum
from types import MappingProxyType
import numpy as np
from openquake.hazardlib.scalerel.base import BaseMSRSigma, BaseASRSigma

NAME = 'Thingbaijam et al.(2017)'

LN_TO_LOG = 1. / np.log(10.)

# unavailable rake, i.e. no estimate requested yet
UNAVAILABLE = float('nan')

# marks that an evaluation should use the rake already set on the instance
_UNSET = object()


class InvalidRakeError(ValueError):
    """
    Raised when a rake is assigned outside [-180, 180] or outside the
    faulting types a relation supports.
    """


class FaultingType(Enum):
    STRIKE_SLIP = 'strike-slip'
    REVERSE = 'reverse'
    NORMAL = 'normal'
    INTERFACE = 'interface'
    INSLAB_NORMAL = 'inslab-normal'
    INVALID = 'invalid'


class Regime(Enum):
    CRUSTAL = 'crustal'
    INTERFACE = 'interface'


# log10-linear regressions: mag = mag_intercept + mag_slope * log10(area),
# log10(area) = area_intercept + area_slope * mag. sigma applies to both.
Coeffs = namedtuple('Coeffs', ['mag_intercept', 'mag_slope', 'area_intercept', 'area_slope', 'sigma'])

_CRUSTAL_COEFFS = {
    FaultingType.STRIKE_SLIP: Coeffs(3.701, 1.062, -3.486, 0.942, 0.184),
    FaultingType.REVERSE: Coeffs(4.158, 0.953, -4.362, 1.049, 0.121),
    FaultingType.NORMAL: Coeffs(3.157, 1.238, -2.551, 0.808, 0.181),
}
_INTERFACE_COEFFS = Coeffs(3.469, 1.054, -3.292, 0.949, 0.150)

COEFFS = MappingProxyType({
    'crustal': MappingProxyType(dict(_CRUSTAL_COEFFS)),
    'subduction': MappingProxyType({
        FaultingType.INTERFACE: _INTERFACE_COEFFS,
        # inslab normal faulting shares the crustal normal-faulting regression
        FaultingType.INSLAB_NORMAL: _CRUSTAL_COEFFS[FaultingType.NORMAL],
    }),
    'unified': MappingProxyType({**_CRUSTAL_COEFFS, FaultingType.INTERFACE: _INTERFACE_COEFFS}),
})


def is_unavailable(rake):
    """
    True when rake is the unavailable sentinel (NaN) or None.
    """
    return rake is None or np.isnan(rake)


def to_regime(regime):
    '''
    Converts a Regime or its string value ('crustal', 'interface') to a Regime.
    Args:
    - regime: Regime or string
    Return:
    - Regime
    '''
    if isinstance(regime, Regime):
        return regime
    try:
        return Regime(str(regime).lower())
    except ValueError:
        raise ValueError(f'Unsupported regime {regime}') from None


def assert_valid_rake(rake):
    '''
    Checks a rake lies within [-180, 180] degrees. The unavailable sentinel passes.
    Args:
    - rake: rake in degrees
    '''
    if is_unavailable(rake):
        return
    if rake < -180. or rake > 180.:
        raise InvalidRakeError(f'Rake angle {rake} must be within -180 and 180 degrees')


class RuptureSetting(namedtuple('RuptureSetting', ['rake', 'regime'])):
    """
    Immutable (rake, regime) pair consumed by the module-level evaluation
    functions. The regime is ignored by the crustal and subduction variants.
    The rake is range checked on construction; None becomes UNAVAILABLE.
    """
    __slots__ = ()

    def __new__(cls, rake=UNAVAILABLE, regime=Regime.CRUSTAL):
        rake = UNAVAILABLE if rake is None else float(rake)
        assert_valid_rake(rake)
        return super().__new__(cls, rake, to_regime(regime))


def classify_rake(rake):
    """
    Classifies the faulting style from rake. Band boundaries belong to strike-slip.
    """
    if is_unavailable(rake):
        return FaultingType.INVALID
    if (-45 <= rake <= 45) or (rake >= 135) or (rake <= -135):
        return FaultingType.STRIKE_SLIP
    elif rake > 0.:
        return FaultingType.REVERSE
    else:
        return FaultingType.NORMAL


def _crustal_type(setting):
    return classify_rake(setting.rake)


def _subduction_type(setting):
    ftype = classify_rake(setting.rake)
    if ftype is FaultingType.REVERSE:
        return FaultingType.INTERFACE
    elif ftype is FaultingType.NORMAL:
        return FaultingType.INSLAB_NORMAL
    # strike-slip is not defined for subduction events
    return FaultingType.INVALID


def _unified_type(setting):
    if is_unavailable(setting.rake):
        return FaultingType.INVALID
    if setting.regime is Regime.INTERFACE:
        return FaultingType.INTERFACE
    return classify_rake(setting.rake)


_FAULTING_TYPE = {
    'crustal': _crustal_type,
    'subduction': _subduction_type,
    'unified': _unified_type,
}


def get_faulting_type(variant, setting):
    '''
    Faulting type used for coefficient selection by a relation variant.
    Args:
    - variant: 'crustal', 'subduction' or 'unified'
    - setting: RuptureSetting
    Return:
    - FaultingType
    '''
    try:
        classify = _FAULTING_TYPE[variant]
    except KeyError:
        raise ValueError(f'Unsupported scaling relation variant {variant}') from None
    return classify(setting)


def get_coeffs(variant, setting):
    '''
    Regression coefficients for a variant and setting, or None when unavailable.
    '''
    return COEFFS[variant].get(get_faulting_type(variant, setting))


def _unavailable(x):
    if np.ndim(x):
        return np.full(np.shape(x), np.nan)
    return np.nan


def median_mag(area, setting, variant='unified'):
    """
    Calculates median magnitude from rupture area (km^2).
    """
    coeffs = get_coeffs(variant, setting)
    if coeffs is None:
        return _unavailable(area)
    return coeffs.mag_intercept + coeffs.mag_slope * np.log(area) * LN_TO_LOG


def median_area(mag, setting, variant='unified'):
    """
    Calculates median rupture area (km^2) from magnitude.
    """
    coeffs = get_coeffs(variant, setting)
    if coeffs is None:
        return _unavailable(mag)
    return np.power(10., coeffs.area_intercept + coeffs.area_slope * np.asarray(mag, dtype=float))


def std_dev(setting, variant='unified'):
    """
    Standard deviation of magnitude, equal to that of log10(area).
    """
    coeffs = get_coeffs(variant, setting)
    if coeffs is None:
        return np.nan
    return coeffs.sigma


class TMG2017Base(BaseMSRSigma, BaseASRSigma):
    """
    Thingbaijam, K.K.S., P.M. Mai and K. Goda 2017. New empirical earthquake source-scaling
    laws. Bulletin of the Seismological Society of America, 107(5), pp 2225-2246.

    Common behaviour of the magnitude-area relations. The rake (and regime, for the
    unified relation) is held on the instance and the faulting type is re-derived
    on every call. Instances are not synchronized; share one across threads only
    under external locking, or use the module-level functions with a RuptureSetting.

    Every evaluation takes an optional rake, following the openquake scalerel
    convention get_median_area(mag, rake). When given it is assigned through
    set_rake before evaluating, so it persists on the instance.

    N.B. the standard deviation of area is for log10(area), not area.
    """
    variant = None
    NAME = NAME

    def __init__(self):
        self._rake = UNAVAILABLE

    def __repr__(self):
        return '<%s rake=%s>' % (self.__class__.__name__, self._rake)

    def _state(self):
        return (None if is_unavailable(self._rake) else self._rake,)

    def __eq__(self, other):
        # same class and same configuration; an unavailable rake equals another
        if other.__class__ is not self.__class__:
            return NotImplemented
        return self._state() == other._state()

    def __ne__(self, other):
        equal = self.__eq__(other)
        return equal if equal is NotImplemented else not equal

    # rake and regime are mutable, so instances are not hashable
    __hash__ = None

    @property
    def rake(self):
        return self._rake

    @rake.setter
    def rake(self, rake):
        self.set_rake(rake)

    def get_rake(self):
        return self._rake

    def set_rake(self, rake):
        """
        Sets the rake, rejecting values outside [-180, 180]. None means unavailable.
        """
        if rake is None:
            rake = UNAVAILABLE
        rake = float(rake)
        assert_valid_rake(rake)
        self._rake = rake

    def get_setting(self):
        return RuptureSetting(self._rake)

    def get_faulting_type(self):
        return get_faulting_type(self.variant, self.get_setting())

    def _update(self, rake):
        if rake is not _UNSET:
            self.set_rake(rake)

    def get_median_mag(self, area, rake=_UNSET):
        """
        Calculates median magnitude from rupture area (km^2).
        """
        self._update(rake)
        return median_mag(area, self.get_setting(), self.variant)

    def get_std_dev_mag(self, area=None, rake=_UNSET):
        """
        Standard deviation of magnitude. Area is accepted for openquake
        compatibility and has no effect.
        """
        self._update(rake)
        return std_dev(self.get_setting(), self.variant)

    def get_median_area(self, mag, rake=_UNSET):
        """
        Calculates median rupture area (km^2) from magnitude.
        """
        self._update(rake)
        return median_area(mag, self.get_setting(), self.variant)

    def get_std_dev_area(self, mag=None, rake=_UNSET):
        """
        Standard deviation of log10(area), numerically the magnitude standard deviation.
        """
        self._update(rake)
        return self.get_std_dev_mag()

    def get_name(self):
        return '%s for %s events' % (NAME, self._LABELS[self.get_faulting_type()])


class TMG2017Crustal(TMG2017Base):
    """
    Shallow crustal relations for strike-slip, reverse and normal faulting.
    """
    variant = 'crustal'
    _LABELS = {
        FaultingType.STRIKE_SLIP: 'crustal Strike-Slip',
        FaultingType.REVERSE: 'crustal Reverse-Faulting',
        FaultingType.NORMAL: 'crustal Normal-Faulting',
        FaultingType.INVALID: 'crustal InvalidRake',
    }


class TMG2017Subduction(TMG2017Base):
    """
    Subduction relations: interface (reverse faulting, rake within 45 to 135) and
    inslab (normal faulting, rake within -45 to -135). Relations for strike-slip
    events are not defined, so such a rake is rejected when set.
    """
    variant = 'subduction'
    _LABELS = {
        FaultingType.INTERFACE: 'Interface',
        FaultingType.INSLAB_NORMAL: 'Inslab-Normal',
        FaultingType.INVALID: 'InvalidRake',
    }

    def set_rake(self, rake):
        if rake is not None and classify_rake(float(rake)) is FaultingType.STRIKE_SLIP:
            raise InvalidRakeError(
                'Rake angle should be either within (45, 135) for interface '
                'or (-45, -135) for inslab-normal events, got %s' % rake)
        super().set_rake(rake)


class TMG2017(TMG2017Base):
    """
    Crustal and subduction-interface relations selected by an explicit regime
    (default crustal). Under the interface regime a single regression is used
    whatever the rake, and strike-slip rakes are accepted. The crustal normal
    faulting relation also applies to inslab events.

    The regime is keyword-only on the evaluations, e.g.
    get_median_mag(area, rake, regime=Regime.INTERFACE), as openquake fixes the
    positional signature to (area, rake) and (mag, rake).
    """
    variant = 'unified'
    _LABELS = {
        FaultingType.STRIKE_SLIP: 'strike-slip',
        FaultingType.REVERSE: 'shallow reverse-faulting',
        FaultingType.NORMAL: 'normal-faulting',
        FaultingType.INTERFACE: 'interface',
        FaultingType.INVALID: 'not available',
    }

    def __init__(self):
        super().__init__()
        self._regime = Regime.CRUSTAL

    def __repr__(self):
        return '<%s rake=%s regime=%s>' % (self.__class__.__name__, self._rake, self._regime.value)

    def _state(self):
        return super()._state() + (self._regime,)

    @property
    def regime(self):
        return self._regime

    @regime.setter
    def regime(self, regime):
        self.set_regime(regime)

    def get_regime(self):
        return self._regime

    def set_regime(self, regime):
        self._regime = to_regime(regime)

    def get_setting(self):
        return RuptureSetting(self._rake, self._regime)

    def _update(self, rake, regime=None):
        # regime is checked before the rake is set, so a failed call changes nothing
        if regime is not None:
            regime = to_regime(regime)
        super()._update(rake)
        if regime is not None:
            self._regime = regime

    def get_median_mag(self, area, rake=_UNSET, *, regime=None):
        """
        Calculates median magnitude from rupture area (km^2), optionally setting
        rake and regime first.
        """
        self._update(rake, regime)
        return median_mag(area, self.get_setting(), self.variant)

    def get_std_dev_mag(self, area=None, rake=_UNSET, *, regime=None):
        self._update(rake, regime)
        return std_dev(self.get_setting(), self.variant)

    def get_median_area(self, mag, rake=_UNSET, *, regime=None):
        """
        Calculates median rupture area (km^2) from magnitude, optionally setting
        rake and regime first.
        """
        self._update(rake, regime)
        return median_area(mag, self.get_setting(), self.variant)

    def get_std_dev_area(self, mag=None, rake=_UNSET, *, regime=None):
        self._update(rake, regime)
        return self.get_std_dev_mag()
