"""Default dataset used when persisted storage is empty or unreadable."""

from promoterflow.models.activity import Activity, ActivityStatus, ActivityType
from promoterflow.models.promoter import Location, Promoter, UserRole


def default_promoters() -> list[Promoter]:
    return [
        Promoter(
            id="p1",
            name="Carlos Mendoza",
            role=UserRole.ADMIN,
            email="admin",
            phone="+52 555 123 4567",
            position="Supervisor de Sistemas",
            zone="Zona Centro",
            status="active",
            last_location=Location(lat=19.4326, lng=-99.1332, address="Zócalo CDMX"),
        ),
        Promoter(
            id="p2",
            name="Elena Rodríguez",
            role=UserRole.FIELD_PROMOTER,
            email="gestor",
            phone="+52 555 987 6543",
            position="Gestor Operativo",
            zone="Zona Norte",
            status="away",
            last_location=Location(lat=19.4194, lng=-99.1673, address="Roma Norte"),
        ),
        Promoter(
            id="p3",
            name="Roberto Gómez",
            role=UserRole.FIELD_PROMOTER,
            email="roberto.g@promoterflow.com",
            phone="+52 555 111 2222",
            position="Gestor Técnico",
            zone="Zona Sur",
            status="active",
            last_location=Location(lat=19.3907, lng=-99.2837, address="Santa Fe"),
        ),
    ]


def default_activities() -> list[Activity]:
    return [
        Activity(
            id="a1",
            promoter_id="p1",
            activity_type=ActivityType.COMMUNITY_VISIT.value,
            objective="Visita Sector 4 - Diagnóstico",
            community="Sector Sur 4",
            date="2026-01-15",
            time="09:00",
            status=ActivityStatus.COMPLETED.value,
            attendee_name="Maria Lopez",
            attendee_role="Presidenta Junta Vecinal",
            additional_observations="Se detectó falta de alumbrado. Vecinos conformes.",
            location=Location(lat=19.4326, lng=-99.1332),
        )
    ]
