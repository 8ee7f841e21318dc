from sqlalchemy import Column, Integer, String
from database.conexion import Base


# ----------- TARIFA POR HABITACION -----------
class RoomRate(Base):
    """Tarifa por noche configurada por el administrador, clave única room_no"""
    __tablename__ = "rates"

    room_no = Column(String(20), primary_key=True)
    room_type = Column(String(100), nullable=False)
    rate = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<RoomRate(room_no='{self.room_no}', rate={self.rate})>"
