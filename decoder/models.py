"""
Типизированные записи конвейера разбора пулов.

Запись пула - закрытое размеченное объединение (поле `protocol`), по
одному варианту на семейство DEX. Все варианты выставляют стороны A/B
под единым именованием, независимо от нативных имен протокола.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from config.token_registry import NATIVE_SOL_MINT


class Protocol(str, Enum):
    RAYDIUM_AMM_V4 = "raydium_amm_v4"
    RAYDIUM_CLMM = "raydium_clmm"
    METEORA_DLMM = "meteora_dlmm"
    PUMPFUN_BONDING_CURVE = "pumpfun_bonding_curve"
    ORCA_WHIRLPOOL = "orca_whirlpool"
    UNSUPPORTED = "unsupported"


PROTOCOL_DISPLAY_NAMES = {
    Protocol.RAYDIUM_AMM_V4: "Raydium AMM V4",
    Protocol.RAYDIUM_CLMM: "Raydium CLMM",
    Protocol.METEORA_DLMM: "Meteora DLMM",
    Protocol.PUMPFUN_BONDING_CURVE: "Pump.fun Bonding Curve",
    Protocol.ORCA_WHIRLPOOL: "Orca Whirlpool",
}

# LP-поля заполняются только для constant-product пулов
NOT_APPLICABLE = "N/A"


class RawAccount(BaseModel):
    """Сырые байты аккаунта и программа-владелец, как их вернул ledger reader."""
    model_config = ConfigDict(frozen=True)

    address: str
    data: bytes
    owner: str

    @property
    def length(self) -> int:
        return len(self.data)


class _PoolRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    token_a_mint: str
    token_b_mint: str

    @model_validator(mode="after")
    def check_sides_not_aliased(self):
        if self.token_a_mint == self.token_b_mint:
            raise ValueError(f"token_a_mint and token_b_mint are both {self.token_a_mint}")
        return self


class _VaultPoolRecord(_PoolRecord):
    token_a_vault: str
    token_b_vault: str

    @model_validator(mode="after")
    def check_vaults_not_aliased(self):
        if self.token_a_vault == self.token_b_vault:
            raise ValueError(f"token_a_vault and token_b_vault are both {self.token_a_vault}")
        return self


class RaydiumAmmPool(_VaultPoolRecord):
    protocol: Literal[Protocol.RAYDIUM_AMM_V4] = Protocol.RAYDIUM_AMM_V4
    status: int
    base_decimals: int
    quote_decimals: int
    swap_fee_numerator: int
    swap_fee_denominator: int
    pool_open_time: int
    lp_mint: str
    lp_supply: int
    open_orders: str
    market_id: str

    @property
    def fee_bps(self) -> Optional[int]:
        if not self.swap_fee_denominator:
            return None
        return self.swap_fee_numerator * 10000 // self.swap_fee_denominator


class RaydiumClmmPool(_VaultPoolRecord):
    protocol: Literal[Protocol.RAYDIUM_CLMM] = Protocol.RAYDIUM_CLMM
    amm_config: str
    fee_rate: int
    protocol_fee_rate: int
    liquidity: int
    sqrt_price_x64: int
    tick_current: int


class OrcaWhirlpool(_VaultPoolRecord):
    protocol: Literal[Protocol.ORCA_WHIRLPOOL] = Protocol.ORCA_WHIRLPOOL
    whirlpools_config: str
    tick_spacing: int
    fee_rate: int
    protocol_fee_rate: int
    liquidity: int
    sqrt_price: int
    tick_current_index: int


class MeteoraDlmmPool(_VaultPoolRecord):
    protocol: Literal[Protocol.METEORA_DLMM] = Protocol.METEORA_DLMM
    bin_step: int
    pair_type: int
    active_bin_id: int
    base_fee_rate: int
    max_fee_rate: int
    protocol_fee: int


class PumpfunBondingCurve(_PoolRecord):
    protocol: Literal[Protocol.PUMPFUN_BONDING_CURVE] = Protocol.PUMPFUN_BONDING_CURVE
    token_a_mint: str = NATIVE_SOL_MINT
    virtual_sol_reserves: int = 0
    virtual_token_reserves: int = 0
    real_sol_reserves: int = 0
    real_token_reserves: int = 0
    token_total_supply: int = 0
    complete: bool = False
    # True, если область резервов не читалась и счетчики обнулены
    reserves_degraded: bool = False


PoolRecord = Annotated[
    Union[RaydiumAmmPool, RaydiumClmmPool, OrcaWhirlpool, MeteoraDlmmPool, PumpfunBondingCurve],
    Field(discriminator="protocol"),
]

VAULT_BASED_PROTOCOLS = (
    Protocol.RAYDIUM_AMM_V4,
    Protocol.RAYDIUM_CLMM,
    Protocol.ORCA_WHIRLPOOL,
    Protocol.METEORA_DLMM,
)


class PoolDetection(BaseModel):
    model_config = ConfigDict(frozen=True)

    protocol: Protocol
    confidence: Literal["high", "medium", "low", "none"]
    reason: str
    account_size: int
    discriminator: str = ""

    @property
    def supported(self) -> bool:
        return self.protocol != Protocol.UNSUPPORTED


class ResolvedReserves(BaseModel):
    model_config = ConfigDict(frozen=True)

    reserve_a: int = Field(ge=0)
    reserve_b: int = Field(ge=0)
    decimals_a: int = Field(ge=0, le=255)
    decimals_b: int = Field(ge=0, le=255)


class HealthStatus(str, Enum):
    HEALTHY = "Healthy"
    WARNING = "Warning"
    CRITICAL = "Critical"


class HealthVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: HealthStatus
    issues: List[str] = Field(default_factory=list)
    # Предупреждения не входят в классификацию статуса
    warnings: List[str] = Field(default_factory=list)
    status_text: Optional[str] = None


class TokenDisplay(BaseModel):
    symbol: str
    name: str
    decimals: Optional[int] = None


class AdjustedPoolReserves(BaseModel):
    """Единая запись резервов пула. Форма не зависит от протокола-источника."""
    model_config = ConfigDict(frozen=True)

    pool_address: str
    pool_type: str
    token_a_mint: str
    token_b_mint: str
    token_a_symbol: str
    token_b_symbol: str
    token_a_amount: Decimal
    token_b_amount: Decimal
    token_a_decimals: int
    token_b_decimals: int
    fee_info: str
    lp_mint: str = NOT_APPLICABLE
    lp_supply: str = NOT_APPLICABLE
    pool_status: HealthStatus
    health_issues: List[str] = Field(default_factory=list)
    health_warnings: List[str] = Field(default_factory=list)
    # Нативный статус протокола ("Active", "Disabled"), иначе значение pool_status
    status_text: str
    tvl_usd: Optional[float] = None
