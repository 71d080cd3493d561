"""
Protocol buffer schema for ZERA transactions.

The message classes are built at import time from a compact field table
into a private descriptor pool, so serialized sizes come from the protobuf
runtime itself and match what the transport layer puts on the wire.
"""
from typing import Dict, List, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory, timestamp_pb2

PACKAGE = "zera_txn"

_F = descriptor_pb2.FieldDescriptorProto

_SCALARS = {
    "string": _F.TYPE_STRING,
    "bytes": _F.TYPE_BYTES,
    "bool": _F.TYPE_BOOL,
    "uint32": _F.TYPE_UINT32,
    "uint64": _F.TYPE_UINT64,
}

_TIMESTAMP = ".google.protobuf.Timestamp"

# (field name, number, type); a leading "repeated " marks repeated fields
_Field = Tuple[str, int, str]

_MESSAGES: List[Tuple[str, List[_Field]]] = [
    ("MultiKey", [
        ("public_keys", 1, "repeated bytes"),
        ("hash_tokens", 2, "repeated string"),
    ]),
    ("PublicKey", [
        ("single", 1, "bytes"),
        ("multi", 2, "MultiKey"),
        ("smart_contract_auth", 3, "bytes"),
        ("governance_auth", 4, "bytes"),
    ]),
    ("BaseTXN", [
        ("public_key", 1, "PublicKey"),
        ("timestamp", 2, "Timestamp"),
        ("fee_amount", 3, "string"),
        ("fee_id", 4, "string"),
        ("signature", 5, "bytes"),
        ("memo", 6, "string"),
        ("hash", 7, "bytes"),
        ("nonce", 8, "uint64"),
        ("safe_send", 9, "bool"),
        ("interface_fee", 10, "string"),
        ("interface_fee_id", 11, "string"),
        ("interface_address", 12, "bytes"),
    ]),
    ("TransferAuthentication", [
        ("public_key", 1, "repeated PublicKey"),
        ("signature", 2, "repeated bytes"),
        ("nonce", 3, "repeated uint64"),
        ("allowance_address", 4, "repeated bytes"),
        ("allowance_nonce", 5, "repeated uint64"),
    ]),
    ("InputTransfers", [
        ("index", 1, "uint64"),
        ("amount", 2, "string"),
        ("fee_percent", 3, "uint32"),
        ("contract_fee_percent", 4, "string"),
    ]),
    ("OutputTransfers", [
        ("wallet_address", 1, "bytes"),
        ("amount", 2, "string"),
        ("memo", 3, "string"),
    ]),
    ("CoinTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("auth", 3, "TransferAuthentication"),
        ("input_transfers", 4, "repeated InputTransfers"),
        ("output_transfers", 5, "repeated OutputTransfers"),
        ("contract_fee_id", 6, "string"),
        ("contract_fee_amount", 7, "string"),
    ]),
    ("MintTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("amount", 3, "string"),
        ("recipient_address", 4, "bytes"),
    ]),
    ("FoundationTXN", [
        ("base", 1, "BaseTXN"),
        ("restricted_symbols", 2, "repeated string"),
    ]),
    ("ItemizedMintTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("item_id", 3, "string"),
        ("recipient_address", 4, "bytes"),
        ("voting_weight", 5, "string"),
        ("expiry", 6, "uint64"),
    ]),
    ("PreMintWallet", [
        ("address", 1, "bytes"),
        ("amount", 2, "string"),
    ]),
    ("CoinDenomination", [
        ("denomination_name", 1, "string"),
        ("amount", 2, "string"),
    ]),
    ("InstrumentContract", [
        ("base", 1, "BaseTXN"),
        ("contract_version", 2, "uint64"),
        ("symbol", 3, "string"),
        ("name", 4, "string"),
        ("contract_id", 5, "string"),
        ("max_supply", 6, "string"),
        ("premint_wallets", 7, "repeated PreMintWallet"),
        ("coin_denomination", 8, "CoinDenomination"),
    ]),
    ("GovernanceVote", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("proposal_id", 3, "bytes"),
        ("support", 4, "bool"),
        ("support_option", 5, "uint32"),
    ]),
    ("GovernanceProposal", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("title", 3, "string"),
        ("synopsis", 4, "string"),
        ("body", 5, "string"),
        ("options", 6, "repeated string"),
        ("start_timestamp", 7, "Timestamp"),
        ("end_timestamp", 8, "Timestamp"),
        ("governance_txn", 9, "repeated bytes"),
    ]),
    ("SmartContractTXN", [
        ("base", 1, "BaseTXN"),
        ("smart_contract_name", 2, "string"),
        ("smart_contract_type", 3, "uint32"),
        ("binary_code", 4, "bytes"),
        ("source_code", 5, "bytes"),
        ("instance", 6, "uint64"),
    ]),
    ("SmartContractExecuteTXN", [
        ("base", 1, "BaseTXN"),
        ("smart_contract_name", 2, "string"),
        ("instance", 3, "uint64"),
        ("function", 4, "string"),
        ("parameters", 5, "repeated string"),
    ]),
    ("CurrencyRate", [
        ("contract_id", 1, "string"),
        ("rate", 2, "string"),
        ("authorized", 3, "bool"),
        ("max_stake", 4, "string"),
    ]),
    ("SelfCurrencyEquiv", [
        ("base", 1, "BaseTXN"),
        ("cur_equiv", 2, "repeated CurrencyRate"),
    ]),
    ("AuthorizedCurrencyEquiv", [
        ("base", 1, "BaseTXN"),
        ("cur_equiv", 2, "repeated CurrencyRate"),
    ]),
    ("ExpenseRatioTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("addresses", 3, "repeated bytes"),
        ("output_address", 4, "bytes"),
    ]),
    ("NFTTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("item_id", 3, "string"),
        ("recipient_address", 4, "bytes"),
        ("contract_fee_id", 5, "string"),
        ("contract_fee_amount", 6, "string"),
    ]),
    ("ContractUpdateTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("contract_version", 3, "uint64"),
        ("name", 4, "string"),
        ("kyc_status", 5, "bool"),
        ("immutable_kyc_status", 6, "bool"),
    ]),
    ("Validator", [
        ("public_key", 1, "PublicKey"),
        ("host", 2, "string"),
        ("client_port", 3, "string"),
        ("validator_port", 4, "string"),
        ("version", 5, "uint64"),
        ("lite", 6, "bool"),
    ]),
    ("ValidatorRegistration", [
        ("base", 1, "BaseTXN"),
        ("validator", 2, "Validator"),
        ("generated_public_key", 3, "PublicKey"),
        ("generated_signature", 4, "bytes"),
        ("register", 5, "bool"),
    ]),
    ("ValidatorHeartbeat", [
        ("base", 1, "BaseTXN"),
        ("online", 2, "bool"),
        ("version", 3, "uint64"),
    ]),
    ("ProposalResult", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("proposal_id", 3, "bytes"),
        ("support_cur_equiv", 4, "string"),
        ("against_cur_equiv", 5, "string"),
        ("passed", 6, "bool"),
        ("final_stage", 7, "bool"),
    ]),
    ("DelegateVote", [
        ("address", 1, "bytes"),
        ("contract_id", 2, "string"),
        ("priority", 3, "uint32"),
    ]),
    ("DelegatedTXN", [
        ("base", 1, "BaseTXN"),
        ("delegate_votes", 2, "repeated DelegateVote"),
        ("delegate_address", 3, "bytes"),
    ]),
    ("RevokeTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("recipient_address", 3, "bytes"),
        ("item_id", 4, "string"),
    ]),
    ("QuashTXN", [
        ("base", 1, "BaseTXN"),
        ("txn_hash", 2, "bytes"),
    ]),
    ("FastQuorumTXN", [
        ("base", 1, "BaseTXN"),
        ("proposal_id", 2, "bytes"),
    ]),
    ("ComplianceAssign", [
        ("contract_id", 1, "string"),
        ("recipient_address", 2, "bytes"),
        ("compliance_level", 3, "uint32"),
        ("assign_revoke", 4, "bool"),
        ("expiry", 5, "uint64"),
    ]),
    ("ComplianceTXN", [
        ("base", 1, "BaseTXN"),
        ("compliance", 2, "repeated ComplianceAssign"),
    ]),
    ("BurnSBTTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("item_id", 3, "string"),
    ]),
    ("RequiredVersion", [
        ("base", 1, "BaseTXN"),
        ("version", 2, "repeated uint64"),
    ]),
    ("SmartContractInstantiateTXN", [
        ("base", 1, "BaseTXN"),
        ("smart_contract_name", 2, "string"),
        ("instance", 3, "uint64"),
        ("parameters", 4, "repeated string"),
    ]),
    ("AllowanceTXN", [
        ("base", 1, "BaseTXN"),
        ("contract_id", 2, "string"),
        ("wallet_address", 3, "bytes"),
        ("authorize", 4, "bool"),
        ("allowed_currency_equivalent", 5, "string"),
        ("allowed_amount", 6, "string"),
        ("period_months", 7, "uint32"),
        ("period_seconds", 8, "uint32"),
        ("start_time", 9, "Timestamp"),
    ]),
]

# Messages whose fields all belong to a single oneof
_ONEOFS = {"PublicKey": "key_type"}


def _json_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="zera_txn.proto",
        package=PACKAGE,
        syntax="proto3",
        dependency=["google/protobuf/timestamp.proto"],
    )
    for message_name, fields in _MESSAGES:
        message_proto = file_proto.message_type.add(name=message_name)
        oneof = _ONEOFS.get(message_name)
        if oneof:
            message_proto.oneof_decl.add(name=oneof)
        for field_name, number, type_spec in fields:
            repeated = type_spec.startswith("repeated ")
            type_name = type_spec.split()[-1]
            field = message_proto.field.add(
                name=field_name,
                number=number,
                json_name=_json_name(field_name),
                label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
            )
            if type_name in _SCALARS:
                field.type = _SCALARS[type_name]
            else:
                field.type = _F.TYPE_MESSAGE
                field.type_name = _TIMESTAMP if type_name == "Timestamp" else f".{PACKAGE}.{type_name}"
            if oneof:
                field.oneof_index = 0
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(timestamp_pb2.DESCRIPTOR.serialized_pb)
_pool.AddSerializedFile(_build_file().SerializeToString())

MESSAGE_CLASSES: Dict[str, type] = {
    name: message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))
    for name, _ in _MESSAGES
}


def message_class(name: str) -> type:
    """
    Return the message class for a short (``CoinTXN``) or full
    (``zera_txn.CoinTXN``) message name.

    Raises:
        KeyError: If the message is not part of the schema
    """
    short = name.split(".")[-1]
    if name != short and not name.startswith(f"{PACKAGE}."):
        raise KeyError(name)
    return MESSAGE_CLASSES[short]

