from pydantic import BaseModel


class PaymentOrderCreate(BaseModel):
    order_id: int


class PaymentOrderResponse(BaseModel):
    order_id: int
    razorpay_order_id: str
    # smallest currency unit, as Razorpay expects
    amount: int
    currency: str
    key_id: str


class PaymentVerifySchema(BaseModel):
    order_id: int
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentVerifyResponse(BaseModel):
    verified: bool
    changed: bool
    order_id: int
    payment_status: str
