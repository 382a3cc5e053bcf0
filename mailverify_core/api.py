"""
OTP HTTP Routes
===============
``POST /send-otp`` and ``POST /verify-otp``.

Engines are read from ``app.state`` (set up by ``create_app``); errors are
turned into JSON by the handlers in ``errors.register_error_handlers``.
"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from .otp import OTPIssuer, OTPVerifier, VerificationGate


class SendOtpRequest(BaseModel):
    email: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    email: Optional[str] = None
    code: Optional[Union[str, int]] = None


def get_issuer(request: Request) -> OTPIssuer:
    return request.app.state.issuer


def get_verifier(request: Request) -> OTPVerifier:
    return request.app.state.verifier


def get_verification_gate(request: Request) -> VerificationGate:
    """Dependency for downstream routes that must only act for verified senders."""
    return request.app.state.gate


def create_otp_router() -> APIRouter:
    router = APIRouter(tags=["OTP"])

    @router.post("/send-otp")
    async def send_otp(body: SendOtpRequest, issuer: OTPIssuer = Depends(get_issuer)):
        result = await issuer.issue(body.email)
        return {"message": "OTP sent", "data": result.receipt.to_dict()}

    @router.post("/verify-otp")
    async def verify_otp(body: VerifyOtpRequest, verifier: OTPVerifier = Depends(get_verifier)):
        await verifier.verify(body.email, body.code)
        return {"message": "Email verified"}

    return router
