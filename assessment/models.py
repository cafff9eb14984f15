"""
Assessment Application Models Registry

This module serves as the central models registry for the assessment app.
It imports and exposes all models from the logical submodules
(question_bank, exams, attempts) so they are registered with Django's ORM.

Author: DSP Development Team
Version: 1.0.0
"""

from .question_bank.models import *

from .exams.models import *

from .attempts.models import *
