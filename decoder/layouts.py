"""
Раскладки аккаунтов пулов для пяти семейств DEX.

Каждая раскладка - именованный набор полей (имя, смещение, тип) плюс
объявленная минимальная длина аккаунта. Раскладки проверяются один раз
при импорте: поля не пересекаются, обязательные поля укладываются в
минимальную длину, расширенные поля лежат за обязательной областью.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from decoder.binary_reader import FIELD_SIZES, READERS, require_length
from processing.errors import LayoutError


@dataclass(frozen=True)
class FieldSpec:
    name: str
    offset: int
    kind: str

    @property
    def size(self) -> int:
        return FIELD_SIZES[self.kind]

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True)
class AccountLayout:
    name: str
    min_length: int
    fields: Tuple[FieldSpec, ...]
    # Поля за пределами min_length, читаются по возможности
    extended_fields: Tuple[FieldSpec, ...] = ()

    def __post_init__(self):
        validate_layout(self)

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields + self.extended_fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.name}: unknown field '{name}'")

    @property
    def extended_length(self) -> int:
        if not self.extended_fields:
            return self.min_length
        return max(spec.end for spec in self.extended_fields)

    def decode_fields(self, data: bytes) -> Dict[str, Any]:
        """Читает все обязательные поля. Короткий буфер отвергается целиком."""
        require_length(data, self.min_length, self.name)
        return {spec.name: READERS[spec.kind](data, spec.offset) for spec in self.fields}

    def decode_extended(self, data: bytes) -> Dict[str, Any]:
        require_length(data, self.extended_length, self.name)
        return {spec.name: READERS[spec.kind](data, spec.offset) for spec in self.extended_fields}


def validate_layout(layout: AccountLayout) -> None:
    names = set()
    for spec in layout.fields + layout.extended_fields:
        if spec.kind not in FIELD_SIZES:
            raise LayoutError(f"{layout.name}.{spec.name}: unknown field type '{spec.kind}'")
        if spec.offset < 0:
            raise LayoutError(f"{layout.name}.{spec.name}: negative offset {spec.offset}")
        if spec.name in names:
            raise LayoutError(f"{layout.name}: duplicate field '{spec.name}'")
        names.add(spec.name)

    for spec in layout.fields:
        if spec.end > layout.min_length:
            raise LayoutError(
                f"{layout.name}.{spec.name}: ends at {spec.end}, beyond minimum length {layout.min_length}"
            )
    required_end = max((spec.end for spec in layout.fields), default=0)
    for spec in layout.extended_fields:
        if spec.offset < required_end:
            raise LayoutError(
                f"{layout.name}.{spec.name}: extended field starts at {spec.offset}, inside required region"
            )

    ordered = sorted(layout.fields + layout.extended_fields, key=lambda s: s.offset)
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.offset < prev.end:
            raise LayoutError(f"{layout.name}: fields '{prev.name}' and '{cur.name}' overlap")


# --- Raydium AMM V4 (constant product), полный аккаунт 752 байта ---
RAYDIUM_AMM_V4_LAYOUT = AccountLayout(
    name="raydium_amm_v4",
    min_length=728,
    fields=(
        FieldSpec("status", 0, "u64"),
        FieldSpec("base_decimal", 32, "u64"),
        FieldSpec("quote_decimal", 40, "u64"),
        FieldSpec("swap_fee_numerator", 176, "u64"),
        FieldSpec("swap_fee_denominator", 184, "u64"),
        FieldSpec("base_need_take_pnl", 192, "u64"),
        FieldSpec("quote_need_take_pnl", 200, "u64"),
        FieldSpec("pool_open_time", 224, "u64"),
        FieldSpec("base_vault", 336, "pubkey"),
        FieldSpec("quote_vault", 368, "pubkey"),
        FieldSpec("base_mint", 400, "pubkey"),
        FieldSpec("quote_mint", 432, "pubkey"),
        FieldSpec("lp_mint", 464, "pubkey"),
        FieldSpec("open_orders", 496, "pubkey"),
        FieldSpec("market_id", 528, "pubkey"),
        FieldSpec("lp_reserve", 720, "u64"),
    ),
)

# --- Raydium CLMM ---
RAYDIUM_CLMM_LAYOUT = AccountLayout(
    name="raydium_clmm",
    min_length=214,
    fields=(
        FieldSpec("discriminator", 0, "discriminator"),
        FieldSpec("amm_config", 8, "pubkey"),
        FieldSpec("token_mint_a", 40, "pubkey"),
        FieldSpec("token_mint_b", 72, "pubkey"),
        FieldSpec("token_vault_a", 104, "pubkey"),
        FieldSpec("token_vault_b", 136, "pubkey"),
        FieldSpec("observation_index", 168, "u16"),
        FieldSpec("fee_rate", 170, "u32"),
        FieldSpec("protocol_fee_rate", 174, "u32"),
        FieldSpec("liquidity", 178, "u128"),
        FieldSpec("sqrt_price_x64", 194, "u128"),
        FieldSpec("tick_current", 210, "i32"),
    ),
)

# --- Orca Whirlpool ---
ORCA_WHIRLPOOL_LAYOUT = AccountLayout(
    name="orca_whirlpool",
    min_length=261,
    fields=(
        FieldSpec("discriminator", 0, "discriminator"),
        FieldSpec("whirlpools_config", 8, "pubkey"),
        FieldSpec("whirlpool_bump", 40, "u8"),
        FieldSpec("tick_spacing", 41, "u16"),
        FieldSpec("fee_rate", 45, "u16"),  # сотые доли базисного пункта
        FieldSpec("protocol_fee_rate", 47, "u16"),
        FieldSpec("liquidity", 49, "u128"),
        FieldSpec("sqrt_price", 65, "u128"),
        FieldSpec("tick_current_index", 81, "i32"),
        FieldSpec("protocol_fee_owed_a", 85, "u64"),
        FieldSpec("protocol_fee_owed_b", 93, "u64"),
        FieldSpec("token_mint_a", 101, "pubkey"),
        FieldSpec("token_vault_a", 133, "pubkey"),
        FieldSpec("fee_growth_global_a", 165, "u128"),
        FieldSpec("token_mint_b", 181, "pubkey"),
        FieldSpec("token_vault_b", 213, "pubkey"),
        FieldSpec("fee_growth_global_b", 245, "u128"),
    ),
)

# --- Meteora DLMM (LbPair) ---
METEORA_DLMM_LAYOUT = AccountLayout(
    name="meteora_dlmm",
    min_length=358,
    fields=(
        FieldSpec("discriminator", 0, "discriminator"),
        FieldSpec("bin_step", 73, "u16"),
        FieldSpec("pair_type", 75, "u8"),
        FieldSpec("active_id", 76, "i32"),
        FieldSpec("base_fee_rate", 80, "u16"),  # базисные пункты
        FieldSpec("max_fee_rate", 82, "u16"),
        FieldSpec("protocol_fee", 84, "u16"),
        FieldSpec("token_x_mint", 230, "pubkey"),
        FieldSpec("token_y_mint", 262, "pubkey"),
        FieldSpec("reserve_x", 294, "pubkey"),
        FieldSpec("reserve_y", 326, "pubkey"),
    ),
)

# --- Pump.fun bonding curve ---
# Обязательная часть - только дискриминатор и mint; резервы читаются по возможности.
PUMPFUN_BONDING_CURVE_LAYOUT = AccountLayout(
    name="pumpfun_bonding_curve",
    min_length=40,
    fields=(
        FieldSpec("discriminator", 0, "discriminator"),
        FieldSpec("token_mint", 8, "pubkey"),
    ),
    extended_fields=(
        FieldSpec("virtual_sol_reserves", 72, "u64"),
        FieldSpec("virtual_token_reserves", 80, "u64"),
        FieldSpec("real_sol_reserves", 88, "u64"),
        FieldSpec("real_token_reserves", 96, "u64"),
        FieldSpec("token_total_supply", 104, "u64"),
        FieldSpec("complete", 112, "u8"),
    ),
)
