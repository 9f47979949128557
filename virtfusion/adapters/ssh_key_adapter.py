# virtfusion/adapters/ssh_key_adapter.py
from ..kinds import SSH_KEY
from .rest_adapter import ResourceAdapter


class SSHKeyAdapter(ResourceAdapter):
    """
    SSH keys cannot be edited once uploaded: every input field is immutable,
    so update() never reaches the API. The public key itself is write-only;
    reads only return its hash (public_key_hash).
    """

    def __init__(self):
        super().__init__(SSH_KEY)
