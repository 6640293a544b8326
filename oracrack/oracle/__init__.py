from .aes_oracle import (
    AesOracle,
    Mode,
    OracleConfig,
    challenge_oracle,
    new_oracle,
    random_config,
)
from .remote import HttpOracle, SocketOracle
