from db.crud.maps import CRUDMap
from db.crud.plantings import CRUDPlanting
from db.crud.plants import CRUDPlant

plants = CRUDPlant()
maps = CRUDMap()
plantings = CRUDPlanting()

crud_registry = {
    "plant": plants,
    "map": maps,
    "planting": plantings,
}
