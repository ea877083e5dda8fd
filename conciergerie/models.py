from typing import Any

from pydantic import BaseModel

# Payloads are stored as-is: only the fields the routes read are declared.


class AssignEmployee(BaseModel):
    id: Any = None
    employe: Any = None


class SetStatus(BaseModel):
    id: Any = None
    etat: Any = None  # true/false or a colour name, stored verbatim in `done`


class SaveOrder(BaseModel):
    date: Any = None
    employe: Any = None
    ordre: Any = None


class DeleteHouse(BaseModel):
    nom: Any = None
