"""Relay request/response schemas.

The request is a closed union tagged by ``type``. Field names follow the
wire format the browser client and the agent API already use, so the
session-init variant is camelCase and the send variant is snake_case.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

NonEmptyStr = Annotated[str, Field(min_length=1)]


class InitializeSession(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["initializeSession"] = "initializeSession"
    user_id: NonEmptyStr = Field(alias="userId")
    session_id: NonEmptyStr = Field(alias="sessionId")


class SendMessage(BaseModel):
    type: Literal["sendMessage"] = "sendMessage"
    app_name: NonEmptyStr
    user_id: NonEmptyStr
    session_id: NonEmptyStr
    # Forwarded untouched; only presence is checked here.
    new_message: Annotated[dict[str, Any], Field(min_length=1)]

    def upstream_payload(self) -> dict[str, Any]:
        return self.model_dump(include={"app_name", "user_id", "session_id", "new_message"})


RelayRequest = Annotated[Union[InitializeSession, SendMessage], Field(discriminator="type")]

relay_request_adapter: TypeAdapter[InitializeSession | SendMessage] = TypeAdapter(RelayRequest)

REQUEST_TYPES = ("initializeSession", "sendMessage")


class RelayResponse(BaseModel):
    """What the relay endpoint returns: a status code and a JSON body."""

    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
