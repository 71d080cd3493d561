"""
Data models for the ZERA fee engine.

Money values are decimal strings. Amounts named ``*_units`` are in the
smallest unit of the currency next to them.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class NetworkFeeDetail(BaseModel):
    """Network fee: fixed plus per-byte USD cost, converted to the settlement currency"""
    fee_types: List[str] = Field(..., alias="feeTypes")
    size_bytes: int = Field(..., alias="sizeBytes")
    fixed_usd: str = Field(..., alias="fixedUsd")
    per_byte_usd: str = Field(..., alias="perByteUsd")
    usd_fee: str = Field(..., alias="usdFee")
    rate: str
    amount: str
    smallest_units: str = Field(..., alias="smallestUnits")

    class Config:
        populate_by_name = True


class ContractFeeDetail(BaseModel):
    """Contract fee in its own currency"""
    contract_id: str = Field(..., alias="contractId")
    fee_type: str = Field(..., alias="feeType")
    fee_currency_id: str = Field(..., alias="feeCurrencyId")
    configured_amount: str = Field(..., alias="configuredAmount")
    amount: str
    smallest_units: str = Field(..., alias="smallestUnits")
    degraded: bool = False
    details: Dict[str, str] = Field(default_factory=dict)

    class Config:
        populate_by_name = True


class InterfaceFeeDetail(BaseModel):
    """Interface fee in its own currency"""
    fee_currency_id: str = Field(..., alias="feeCurrencyId")
    provider_address: str = Field(..., alias="providerAddress")
    amount: str
    smallest_units: str = Field(..., alias="smallestUnits")

    class Config:
        populate_by_name = True


class FeeComponents(BaseModel):
    network: NetworkFeeDetail
    contract: Optional[ContractFeeDetail] = None
    interface: Optional[InterfaceFeeDetail] = None


class RateDetail(BaseModel):
    rate: str
    source: str
    floored: bool = False


class FeeBreakdown(BaseModel):
    """Result of a fee calculation"""
    network_fee: str = Field(..., alias="networkFee")
    contract_fee: Optional[str] = Field(None, alias="contractFee")
    interface_fee: Optional[str] = Field(None, alias="interfaceFee")
    total_fee: str = Field(..., alias="totalFee")
    fee_currency_id: str = Field(..., alias="feeCurrencyId")
    breakdown: FeeComponents
    transaction_kind: str = Field(..., alias="transactionKind")
    converged: bool = True
    iterations: int = 1
    used_fallback_rate: bool = Field(False, alias="usedFallbackRate")
    rates: Dict[str, RateDetail] = Field(default_factory=dict)
    transaction: Any = Field(None, exclude=True)

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, as sent across language boundaries."""
        return self.model_dump(by_alias=True)
