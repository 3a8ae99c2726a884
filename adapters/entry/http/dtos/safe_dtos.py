from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.domain.entities.safe_entities import SafeTxRequest

BytesIn = Union[str, List[int]]


class SafeInfoOut(BaseModel):
    address: str
    isDeployed: bool


class SafeTxOut(BaseModel):
    blockHash: str
    transactionHash: str


class SafeErrOut(BaseModel):
    code: int
    message: str


class SafeCallRequest(BaseModel):
    """
    Body of PUT /v1/safe/{address}: one Safe `execTransaction`.

    `data` and `signatures` take a 0x hex string or a JSON array of byte
    values. Numeric fields are decimal strings (JSON integers are accepted too).
    Semantic validation happens in the core so errors name the field.
    """

    to: str
    value: Union[str, int] = Field(default="0")
    data: BytesIn = Field(default="0x")
    operation: int = Field(default=0, description="0 = Call, 1 = DelegateCall")
    safe_tx_gas: Union[str, int] = Field(default="0", alias="safeTxGas")
    base_gas: Union[str, int] = Field(default="0", alias="baseGas")
    gas_price: Union[str, int] = Field(default="0", alias="gasPrice")
    gas_token: str = Field(default="0x0000000000000000000000000000000000000000", alias="gasToken")
    refund_receiver: str = Field(
        default="0x0000000000000000000000000000000000000000", alias="refundReceiver"
    )
    signatures: BytesIn = Field(..., description="Owner signatures, packed as the Safe expects")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("value", "safe_tx_gas", "base_gas", "gas_price")
    @classmethod
    def _as_decimal_str(cls, v: Union[str, int]) -> str:
        if isinstance(v, bool):
            raise ValueError("expected a decimal string")
        return str(v).strip()

    def to_request(self) -> SafeTxRequest:
        return SafeTxRequest(
            to=self.to,
            value=self.value,
            data=self.data,
            operation=self.operation,
            safe_tx_gas=self.safe_tx_gas,
            base_gas=self.base_gas,
            gas_price=self.gas_price,
            gas_token=self.gas_token,
            refund_receiver=self.refund_receiver,
            signatures=self.signatures,
        )
