from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from matchdesk.database import Base


class Tournament(Base):
    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 2 = knockout ties are played over two legs
    knockout_legs: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    matches: Mapped[list["Match"]] = relationship("Match", back_populates="tournament")
