"""
Request models for the invocation boundary.

Callers (workflow nodes, API handlers) send camelCase field names; the
models accept either spelling and convert to the engine's dataclasses.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.types import AuthMethod, Credentials, DeviceType, JumpHostCredentials

Operation = Literal['send-command', 'send-config', 'get-running-config', 'save-config', 'reboot']


class CredentialsPayload(BaseModel):
    """Device credentials as supplied by the caller."""
    host: str = Field(min_length=1)
    port: int = Field(22, ge=1, le=65535)
    username: str = Field(min_length=1)
    auth_method: Literal['password', 'privateKey'] = Field('password', alias='authMethod')
    password: Optional[str] = None
    private_key: Optional[str] = Field(None, alias='privateKey')
    passphrase: Optional[str] = None
    device_type: str = Field(DeviceType.GENERIC.value, alias='deviceType')
    enable_password: Optional[str] = Field(None, alias='enablePassword')
    timeout: Optional[float] = Field(None, gt=0)
    command_timeout: Optional[float] = Field(None, gt=0, alias='commandTimeout')
    keep_alive: bool = Field(True, alias='keepAlive')
    fast_mode: bool = Field(False, alias='fastMode')
    connection_pooling: bool = Field(False, alias='connectionPooling')

    use_jump_host: bool = Field(False, alias='useJumpHost')
    jump_host_host: Optional[str] = Field(None, alias='jumpHostHost')
    jump_host_port: int = Field(22, ge=1, le=65535, alias='jumpHostPort')
    jump_host_username: Optional[str] = Field(None, alias='jumpHostUsername')
    jump_host_auth_method: Literal['password', 'privateKey'] = Field('password', alias='jumpHostAuthMethod')
    jump_host_password: Optional[str] = Field(None, alias='jumpHostPassword')
    jump_host_private_key: Optional[str] = Field(None, alias='jumpHostPrivateKey')
    jump_host_passphrase: Optional[str] = Field(None, alias='jumpHostPassphrase')

    class Config:
        populate_by_name = True

    @field_validator('device_type')
    @classmethod
    def normalize_device_type(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator('passphrase', 'jump_host_passphrase')
    @classmethod
    def blank_passphrase_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @model_validator(mode='after')
    def check_auth_material(self) -> 'CredentialsPayload':
        if self.auth_method == AuthMethod.PRIVATE_KEY.value and not self.private_key:
            raise ValueError('privateKey is required when authMethod is privateKey')
        if self.use_jump_host:
            if not self.jump_host_host or not self.jump_host_username:
                raise ValueError('jumpHostHost and jumpHostUsername are required when useJumpHost is set')
            if self.jump_host_auth_method == AuthMethod.PRIVATE_KEY.value and not self.jump_host_private_key:
                raise ValueError('jumpHostPrivateKey is required when jumpHostAuthMethod is privateKey')
        return self

    def to_credentials(self) -> Credentials:
        """Build the immutable engine credentials."""
        jump_host = None
        if self.use_jump_host:
            jump_host = JumpHostCredentials(
                host=self.jump_host_host,
                username=self.jump_host_username,
                port=self.jump_host_port,
                auth_method=AuthMethod(self.jump_host_auth_method),
                password=self.jump_host_password,
                private_key=self.jump_host_private_key,
                passphrase=self.jump_host_passphrase,
            )

        key_auth = self.auth_method == AuthMethod.PRIVATE_KEY.value
        return Credentials(
            host=self.host,
            username=self.username,
            device_type=self.device_type,
            port=self.port,
            auth_method=AuthMethod(self.auth_method),
            password=None if key_auth else self.password,
            private_key=self.private_key if key_auth else None,
            passphrase=self.passphrase if key_auth else None,
            enable_password=self.enable_password,
            timeout=self.timeout,
            command_timeout=self.command_timeout,
            keep_alive=self.keep_alive,
            fast_mode=self.fast_mode,
            connection_pooling=self.connection_pooling,
            jump_host=jump_host,
        )


class OperationRequest(BaseModel):
    """One operation to run against one device."""
    operation: Operation
    credentials: CredentialsPayload
    command: Optional[str] = None
    config_lines: List[str] = Field(default_factory=list, alias='configCommands')
    commit: Optional[bool] = None

    class Config:
        populate_by_name = True

    @field_validator('config_lines', mode='before')
    @classmethod
    def split_config_lines(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split('\n')
        return [line.strip() for line in value if line and line.strip()]

    @model_validator(mode='after')
    def check_operation_inputs(self) -> 'OperationRequest':
        if self.operation == 'send-command' and not (self.command and self.command.strip()):
            raise ValueError('command is required for send-command')
        if self.operation == 'send-config' and not self.config_lines:
            raise ValueError('configCommands are required for send-config')
        return self
