from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .decoder import DecodeResult, Status
from .utils import base64_to_bytes, text_to_bytes


class UplinkIn(BaseModel):
    port: int = Field(default=1, validation_alias=AliasChoices("port", "f_port", "fport"))
    payload: bytes = Field(validation_alias=AliasChoices("payload", "frm_payload", "payload_raw", "bytes"))

    @model_validator(mode="before")
    @classmethod
    def _unwrap_network_uplink(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        # TTN v3 webhooks nest the radio fields under uplink_message
        if isinstance(data.get("uplink_message"), dict):
            data = data["uplink_message"]
        # frm_payload / payload_raw are always base64 on the network server side
        for key in ("frm_payload", "payload_raw"):
            if isinstance(data.get(key), str):
                data = {**data, key: base64_to_bytes(data[key])}
        return data

    @field_validator("payload", mode="before")
    @classmethod
    def _coerce_payload(cls, v: Any) -> bytes:
        if isinstance(v, (bytes, bytearray)):
            return bytes(v)
        if isinstance(v, str):
            return text_to_bytes(v)
        if isinstance(v, list):
            try:
                return bytes(v)
            except TypeError as exc:
                raise ValueError("payload list must contain ints 0..255") from exc
        raise ValueError("payload must be hex, base64 or a list of byte values")


class DecodedOut(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vBat: Optional[float] = None
    vBus: Optional[float] = None
    boot: Optional[int] = None
    tempC: Optional[float] = None
    error: Optional[Literal["none"]] = None
    p: Optional[float] = None
    rh: Optional[float] = None
    tDewC: Optional[float] = None
    lux: Optional[int] = None
    tWater: Optional[float] = None
    tSoil: Optional[float] = None
    rhSoil: Optional[float] = None
    tSoilDew: Optional[float] = None
    powerUsedCount: Optional[int] = None
    powerSourcedCount: Optional[int] = None
    powerUsedPerHour: Optional[float] = None
    powerSourcedPerHour: Optional[float] = None
    aqi: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        # absent groups stay absent
        return self.model_dump(exclude_none=True)


class DecodeResultOut(BaseModel):
    status: Status
    port: int
    fmt: Optional[int] = None
    decoded: DecodedOut

    @classmethod
    def from_result(cls, result: DecodeResult, port: int) -> "DecodeResultOut":
        return cls(
            status=result.status,
            port=port,
            fmt=result.fmt,
            decoded=DecodedOut(**result.record),
        )

    def to_dict(self) -> dict[str, Any]:
        out = self.model_dump(exclude={"decoded"})
        out["decoded"] = self.decoded.to_dict()
        return out
