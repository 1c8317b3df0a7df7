# Import every model so Base.metadata knows all tables (Alembic, tests).
from .session import Session
from .participant import Participant
from .draft import SessionDraft
from .payment_proof import PaymentProof
from .session_host import SessionHost
