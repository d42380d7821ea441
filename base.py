# ========================================================
# base.py
# ========================================================
# ===================================================
# Declarative Base shared by db.py and models.py
# ===================================================

from sqlalchemy.orm import declarative_base

Base = declarative_base()
