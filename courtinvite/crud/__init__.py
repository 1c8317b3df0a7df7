# courtinvite/crud/__init__.py

from .crud_draft import draft_crud
from .crud_participant import participant_crud
from .crud_payment_proof import payment_proof_crud
from .crud_session import session_crud
from .crud_session_host import session_host_crud
