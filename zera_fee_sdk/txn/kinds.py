"""
Transaction, key and hash kinds of the ZERA network.
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional


class TxnKind(IntEnum):
    """Transaction kinds, numbered as on the network."""
    COIN = 0
    MINT = 1
    FOUNDATION = 2
    ITEM_MINT = 3
    CONTRACT = 4
    VOTE = 5
    PROPOSAL = 6
    SMART_CONTRACT = 7
    SMART_CONTRACT_EXECUTE = 8
    SELF_CURRENCY_EQUIV = 9
    AUTHORIZED_CURRENCY_EQUIV = 10
    EXPENSE_RATIO = 11
    NFT = 12
    UPDATE_CONTRACT = 13
    VALIDATOR_REGISTRATION = 14
    VALIDATOR_HEARTBEAT = 15
    PROPOSAL_RESULT = 16
    DELEGATED_VOTING = 17
    REVOKE = 18
    QUASH = 19
    FAST_QUORUM = 20
    COMPLIANCE = 21
    SBT_BURN = 22
    REQUIRED_VERSION = 23
    SMART_CONTRACT_INSTANTIATE = 24
    UNKNOWN = 25
    ALLOWANCE = 26


class KeyKind(str, Enum):
    """Signing-key families. ``PRIMARY`` is ed25519, ``EXTENDED`` is ed448."""
    PRIMARY = "A"
    EXTENDED = "B"


class HashKind(str, Enum):
    """Hash schemes that may be tagged in a public key identifier."""
    SHA3_256 = "a"
    SHA3_512 = "b"
    BLAKE3 = "c"
    CUSTOM_D = "d"
    CUSTOM_E = "e"
    CUSTOM_F = "f"
    CUSTOM_G = "g"
    CUSTOM_DBZ = "dbz"
    CUSTOM_H = "h"
    CUSTOM_I = "i"
    CUSTOM_J = "j"


DEFAULT_HASH_KIND = HashKind.SHA3_256
DEFAULT_HASH_BYTES = 32

KEY_BYTES: Dict[KeyKind, int] = {
    KeyKind.PRIMARY: 32,
    KeyKind.EXTENDED: 57,
}

SIGNATURE_BYTES: Dict[KeyKind, int] = {
    KeyKind.PRIMARY: 64,
    KeyKind.EXTENDED: 114,
}

HASH_BYTES: Dict[HashKind, int] = {
    HashKind.SHA3_256: 32,
    HashKind.SHA3_512: 64,
    HashKind.BLAKE3: 32,
}

RESTRICTED_PREFIX = b"r_"
TOKEN_SEPARATOR = b"_"


@dataclass(frozen=True)
class KeyDescriptor:
    kind: KeyKind
    byte_length: int
    restricted: bool = False

    @property
    def signature_bytes(self) -> int:
        return SIGNATURE_BYTES[self.kind]

    @property
    def fee_type(self) -> str:
        return f"{self.kind.value}_KEY_FEE"


@dataclass(frozen=True)
class HashDescriptor:
    kind: HashKind
    byte_length: int
    is_default: bool = False

    @classmethod
    def default(cls) -> "HashDescriptor":
        return cls(DEFAULT_HASH_KIND, DEFAULT_HASH_BYTES, is_default=True)

    @classmethod
    def for_kind(cls, kind: HashKind) -> "HashDescriptor":
        return cls(kind, HASH_BYTES.get(kind, DEFAULT_HASH_BYTES))

    @property
    def fee_type(self) -> str:
        return f"{self.kind.value}_HASH_FEE"


@dataclass(frozen=True)
class KindSpec:
    """Wire message, probe key and per-byte fee token of a transaction kind."""
    kind: TxnKind
    message_name: Optional[str]
    wrapper_key: Optional[str]
    fee_type: str
    value_transfer: bool = False


KIND_SPECS = (
    KindSpec(TxnKind.COIN, "CoinTXN", "coin_txn", "COIN_TXN_FEE", value_transfer=True),
    KindSpec(TxnKind.MINT, "MintTXN", "mint_txn", "MINT_TXN_FEE"),
    KindSpec(TxnKind.FOUNDATION, "FoundationTXN", "foundation_txn", "FOUNDATION_TXN_FEE"),
    KindSpec(TxnKind.ITEM_MINT, "ItemizedMintTXN", "item_mint_txn", "ITEM_MINT_TXN_FEE"),
    KindSpec(TxnKind.CONTRACT, "InstrumentContract", "instrument_contract", "CONTRACT_TXN_FEE"),
    KindSpec(TxnKind.VOTE, "GovernanceVote", "governance_vote", "VOTE_TXN_FEE"),
    KindSpec(TxnKind.PROPOSAL, "GovernanceProposal", "governance_proposal", "PROPOSAL_TXN_FEE"),
    KindSpec(TxnKind.SMART_CONTRACT, "SmartContractTXN", "smart_contract_txn", "SMART_CONTRACT_DEPLOYMENT_FEE"),
    KindSpec(TxnKind.SMART_CONTRACT_EXECUTE, "SmartContractExecuteTXN", "smart_contract_execute_txn",
             "SMART_CONTRACT_EXECUTE_FEE"),
    KindSpec(TxnKind.SELF_CURRENCY_EQUIV, "SelfCurrencyEquiv", "self_cur_equiv", "SELF_CURRENCY_EQUIV_FEE"),
    KindSpec(TxnKind.AUTHORIZED_CURRENCY_EQUIV, "AuthorizedCurrencyEquiv", "authorized_cur_equiv",
             "AUTHORIZED_CURRENCY_EQUIV_FEE"),
    KindSpec(TxnKind.EXPENSE_RATIO, "ExpenseRatioTXN", "expense_ratio_txn", "EXPENSE_RATIO_FEE"),
    KindSpec(TxnKind.NFT, "NFTTXN", "nft_txn", "NFT_TXN_FEE"),
    KindSpec(TxnKind.UPDATE_CONTRACT, "ContractUpdateTXN", "contract_update_txn", "UPDATE_CONTRACT_FEE"),
    KindSpec(TxnKind.VALIDATOR_REGISTRATION, "ValidatorRegistration", "validator_registration",
             "VALIDATOR_REGISTRATION_FEE"),
    KindSpec(TxnKind.VALIDATOR_HEARTBEAT, "ValidatorHeartbeat", "validator_heartbeat", "VALIDATOR_HEARTBEAT_FEE"),
    KindSpec(TxnKind.PROPOSAL_RESULT, "ProposalResult", "proposal_result", "PROPOSAL_RESULT_FEE"),
    KindSpec(TxnKind.DELEGATED_VOTING, "DelegatedTXN", "delegated_txn", "DELEGATED_VOTING_FEE"),
    KindSpec(TxnKind.REVOKE, "RevokeTXN", "revoke_txn", "REVOKE_TXN_FEE"),
    KindSpec(TxnKind.QUASH, "QuashTXN", "quash_txn", "QUASH_TXN_FEE"),
    KindSpec(TxnKind.FAST_QUORUM, "FastQuorumTXN", "fast_quorum_txn", "FAST_QUORUM_FEE"),
    KindSpec(TxnKind.COMPLIANCE, "ComplianceTXN", "compliance_txn", "COMPLIANCE_FEE"),
    KindSpec(TxnKind.SBT_BURN, "BurnSBTTXN", "burn_sbt_txn", "SBT_BURN_FEE"),
    KindSpec(TxnKind.REQUIRED_VERSION, "RequiredVersion", "required_version", "REQUIRED_VERSION_FEE"),
    KindSpec(TxnKind.SMART_CONTRACT_INSTANTIATE, "SmartContractInstantiateTXN", "smart_contract_instantiate_txn",
             "SMART_CONTRACT_INSTANTIATE_FEE"),
    KindSpec(TxnKind.UNKNOWN, None, None, "UNKNOWN_TXN_FEE"),
    KindSpec(TxnKind.ALLOWANCE, "AllowanceTXN", "allowance_txn", "ALLOWANCE_FEE"),
)

SPEC_BY_KIND: Dict[TxnKind, KindSpec] = {spec.kind: spec for spec in KIND_SPECS}
SPEC_BY_MESSAGE: Dict[str, KindSpec] = {
    spec.message_name: spec for spec in KIND_SPECS if spec.message_name
}
