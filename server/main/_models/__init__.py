# Import users first; the academic models reference it through AUTH_USER_MODEL
from .users import *
from .academics import *
from .content import *
from .quiz import *
