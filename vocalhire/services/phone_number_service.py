"""Provisioning provider phone numbers and linking them to interviews."""

import re
from typing import Optional, Union

import structlog
from sqlalchemy.orm import Session

from vocalhire.config.settings import settings
from vocalhire.integrations.retell import RetellClient
from vocalhire.middleware.error_handler import BadRequestError, NotFoundError
from vocalhire.models import PhoneNumber

logger = structlog.get_logger()

DEFAULT_NICKNAME = "Interview Phone"


def parse_area_code(area_code: Union[str, int, None]) -> int:
    """Validate a three-digit area code.

    Raises:
        BadRequestError: If the code is not exactly three ASCII digits
    """
    text = str(area_code).strip() if area_code is not None else ""
    if not re.fullmatch(r"[0-9]{3}", text):
        raise BadRequestError(
            f"Invalid area code: {area_code}. Must be a 3-digit number.",
            field="areaCode",
        )
    return int(text)


class PhoneNumberService:
    """Phone numbers owned by an organization.

    Linking talks to the provider first and updates the local row second;
    the two steps are not atomic. If the provider call fails nothing local
    changes; if the local write fails the provider is already pointed at the
    agent and a repeat link or unlink reconciles it.
    """

    def __init__(self, db: Session, retell: RetellClient):
        self.db = db
        self.retell = retell

    def list_for_organization(self, organization_id: str) -> list[PhoneNumber]:
        return (
            self.db.query(PhoneNumber)
            .filter(PhoneNumber.organization_id == organization_id)
            .order_by(PhoneNumber.id)
            .all()
        )

    def list_available(self, organization_id: str) -> list[PhoneNumber]:
        return (
            self.db.query(PhoneNumber)
            .filter(
                PhoneNumber.organization_id == organization_id,
                PhoneNumber.is_available.is_(True),
            )
            .order_by(PhoneNumber.id)
            .all()
        )

    def get(self, phone_number_id: int, organization_id: Optional[str] = None) -> PhoneNumber:
        query = self.db.query(PhoneNumber).filter(PhoneNumber.id == phone_number_id)
        if organization_id is not None:
            query = query.filter(PhoneNumber.organization_id == organization_id)
        phone_number = query.first()
        if not phone_number:
            raise NotFoundError("Phone number", phone_number_id)
        return phone_number

    def find_by_number(self, number: Optional[str]) -> Optional[PhoneNumber]:
        if not number:
            return None
        return self.db.query(PhoneNumber).filter(PhoneNumber.number == number).first()

    def find_by_agent(self, agent_id: Optional[str]) -> Optional[PhoneNumber]:
        if not agent_id:
            return None
        return (
            self.db.query(PhoneNumber)
            .filter(PhoneNumber.agent_linked == agent_id)
            .order_by(PhoneNumber.id)
            .first()
        )

    async def acquire(
        self,
        organization_id: str,
        area_code: Union[str, int, None],
        nickname: Optional[str] = None,
    ) -> PhoneNumber:
        """Buy a number from the provider and record it as available."""
        code = parse_area_code(area_code)

        logger.info("Acquiring phone number", organization_id=organization_id, area_code=code)
        created = await self.retell.create_phone_number(code)

        phone_number = PhoneNumber(
            number=created["phone_number"],
            organization_id=organization_id,
            nickname=nickname or None,
            is_available=True,
        )
        self.db.add(phone_number)
        self.db.commit()
        self.db.refresh(phone_number)

        logger.info("Phone number acquired", phone_number_id=phone_number.id, number=phone_number.number)
        return phone_number

    async def link(
        self,
        phone_number_id: int,
        agent_id: str,
        interview_id: str,
        organization_id: Optional[str] = None,
        nickname: Optional[str] = None,
    ) -> PhoneNumber:
        """Route inbound calls on a number to an interview's agent."""
        phone_number = self.get(phone_number_id, organization_id)

        logger.info(
            "Linking phone number",
            number=phone_number.number,
            agent_id=agent_id,
            interview_id=interview_id,
            webhook_url=settings.webhook_url,
        )
        await self.retell.update_phone_number(
            phone_number.number,
            inbound_agent_id=agent_id,
            nickname=nickname or phone_number.nickname or DEFAULT_NICKNAME,
            webhook_url=settings.webhook_url,
            metadata={"interview_id": interview_id, "phone_number": phone_number.number},
        )

        phone_number.is_available = False
        phone_number.agent_linked = agent_id
        phone_number.interview_id = interview_id
        self.db.commit()
        self.db.refresh(phone_number)

        logger.info("Phone number linked", number=phone_number.number, agent_id=agent_id)
        return phone_number

    async def unlink(self, phone_number_id: int, organization_id: Optional[str] = None) -> PhoneNumber:
        """Detach a number from its agent and return it to the pool."""
        phone_number = self.get(phone_number_id, organization_id)

        await self.retell.update_phone_number(phone_number.number, inbound_agent_id=None)

        phone_number.is_available = True
        phone_number.agent_linked = None
        phone_number.interview_id = None
        self.db.commit()
        self.db.refresh(phone_number)

        logger.info("Phone number unlinked", number=phone_number.number)
        return phone_number
