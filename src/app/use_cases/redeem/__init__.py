"""Redeem code use cases"""
from .generate_redeem_codes import GenerateRedeemCodes, generate_code
from .redeem_code import RedeemCode
from .list_redeem_codes import ListRedeemCodes
from .dtos import (
    GenerateRedeemCodesCommandDTO,
    GenerateRedeemCodesResponseDTO,
    RedeemCommandDTO,
    RedeemResponseDTO,
    RedeemCodeResponseDTO,
    ListRedeemCodesResponseDTO,
)

__all__ = [
    "GenerateRedeemCodes",
    "generate_code",
    "RedeemCode",
    "ListRedeemCodes",
    "GenerateRedeemCodesCommandDTO",
    "GenerateRedeemCodesResponseDTO",
    "RedeemCommandDTO",
    "RedeemResponseDTO",
    "RedeemCodeResponseDTO",
    "ListRedeemCodesResponseDTO",
]
