"""
Per-test factory that tracks the doubles it creates.
"""

from typing import Any, Iterable, List, Mapping, Optional, Union

from stunt.core.config import Settings, get_settings
from stunt.core.errors import ExpectationFailedError
from stunt.core.models import DoubleMode
from stunt.introspector import ContractLike
from stunt.synthesizer import DoubleSynthesizer, control_of, get_synthesizer
from stunt.verify import VerificationReport, verify


class DoubleFactory:
    """
    Create doubles for one test case and verify them together.

    Usage:
        factory = DoubleFactory()
        mock = factory.create_mock(Observer)
        ...
        factory.assert_expectations()
    """

    def __init__(self, synthesizer: Optional[DoubleSynthesizer] = None,
                 settings: Optional[Settings] = None):
        self.synthesizer = synthesizer or get_synthesizer()
        self.settings = settings or get_settings()
        self._doubles: List[Any] = []

    @property
    def doubles(self) -> List[Any]:
        return list(self._doubles)

    def _track(self, double: Any) -> Any:
        self._doubles.append(double)
        return double

    def create_double(self, contract: ContractLike, mode: Union[DoubleMode, str] = DoubleMode.MOCK) -> Any:
        return self._track(self.synthesizer.create_double(contract, mode))

    def create_stub(self, contract: ContractLike) -> Any:
        return self.create_double(contract, DoubleMode.STUB)

    def create_mock(self, contract: ContractLike) -> Any:
        return self.create_double(contract, DoubleMode.MOCK)

    def create_intersection_double(self, contracts: Iterable[ContractLike],
                                   mode: Union[DoubleMode, str] = DoubleMode.MOCK) -> Any:
        return self._track(self.synthesizer.create_intersection_double(contracts, mode))

    def create_configured_double(self, contract: ContractLike, mode: Union[DoubleMode, str],
                                 values: Mapping[str, Any]) -> Any:
        return self._track(self.synthesizer.create_configured_double(contract, mode, values))

    def create_configured_stub(self, contract: ContractLike, values: Mapping[str, Any]) -> Any:
        return self.create_configured_double(contract, DoubleMode.STUB, values)

    def verify_all(self) -> List[VerificationReport]:
        """
        One report per tracked mock, in creation order.

        Stubs are included only when verify_stub_expectations is set.
        """
        include_stubs = self.settings.verify_stub_expectations
        return [
            verify(d, self.settings) for d in self._doubles
            if include_stubs or control_of(d).mode is DoubleMode.MOCK
        ]

    def assert_expectations(self) -> None:
        """Raise ExpectationFailedError for the first double with failures"""
        for report in self.verify_all():
            report.raise_for_failures()
