"""
Maps a structured message onto write statements for a target database.
The mapping only reads the message; it does not talk to any database.
"""
import json
import logging
from typing import Any, Dict, Optional, Union

from config_models import TargetSchema
from edifact_models import StructuredMessage

logger = logging.getLogger(__name__)


def map_to_target_schema(message: StructuredMessage, target_schema: Union[TargetSchema, str]) -> Optional[Dict[str, Any]]:
    try:
        target = TargetSchema(target_schema)
    except ValueError:
        logger.warning(f"Unknown target schema '{target_schema}'; no mapping produced.")
        return None

    if target == TargetSchema.NEO4J:
        return map_to_neo4j(message)
    if target == TargetSchema.MONGODB:
        return map_to_mongodb(message)
    if target == TargetSchema.POSTGRES:
        return map_to_postgres(message)
    return None


def map_to_neo4j(message: StructuredMessage) -> Dict[str, Any]:
    metadata = message.metadata
    statements = [{
        'cypher': (
            "CREATE (m:Message {id: $id, type: $type, reference_number: $ref, timestamp: $ts})"
        ),
        'parameters': {
            'id': metadata.reference_number,
            'type': metadata.message_type,
            'ref': metadata.reference_number,
            'ts': metadata.parsed_at.isoformat(),
        },
    }]

    for role, party in message.parties.items():
        statements.append({
            'cypher': (
                "MERGE (p:Party {mp_id: $mp_id}) "
                "ON CREATE SET p.name = $name, p.role = $role "
                "WITH p "
                "MATCH (m:Message {id: $msg_id}) "
                f"CREATE (m)-[:{role.upper()}]->(p)"
            ),
            'parameters': {
                'mp_id': party.id,
                'name': party.name,
                'role': party.role,
                'msg_id': metadata.reference_number,
            },
        })
    return {'statements': statements}


def map_to_mongodb(message: StructuredMessage) -> Dict[str, Any]:
    stammdaten = message.body.stammdaten
    document = message.model_dump(
        mode='json',
        include={'metadata', 'header', 'body', 'dates', 'references', 'segment_groups'},
    )
    document.update({
        '_id': message.metadata.reference_number,
        'message_type': message.metadata.message_type,
        'parties': [{**party.model_dump(), 'role_name': role} for role, party in message.parties.items()],
        'created_at': message.metadata.parsed_at,
        'indexes': {
            'malo_ids': [malo.id for malo in stammdaten.marktlokationen] if stammdaten else [],
            'melo_ids': [melo.id for melo in stammdaten.messlokationen] if stammdaten else [],
            'mp_ids': [party.id for party in message.parties.values()],
        },
    })
    return {
        'collection': 'edifact_messages',
        'document': document,
        'indexes': [
            {'key': {'metadata.message_type': 1}},
            {'key': {'indexes.malo_ids': 1}},
            {'key': {'indexes.mp_ids': 1}},
            {'key': {'created_at': -1}},
        ],
    }


def map_to_postgres(message: StructuredMessage) -> Dict[str, Any]:
    metadata = message.metadata
    stammdaten = message.body.stammdaten
    return {
        'tables': {
            'messages': {
                'insert': (
                    "INSERT INTO messages (reference_number, message_type, parsed_at, metadata) "
                    "VALUES ($1, $2, $3, $4)"
                ),
                'params': [
                    metadata.reference_number,
                    metadata.message_type,
                    metadata.parsed_at.isoformat(),
                    json.dumps(metadata.model_dump(mode='json')),
                ],
            },
            'parties': [
                {
                    'insert': (
                        "INSERT INTO parties (message_ref, mp_id, name, role, valid_mp_id) "
                        "VALUES ($1, $2, $3, $4, $5)"
                    ),
                    'params': [metadata.reference_number, party.id, party.name, party.role, party.valid_mp_id],
                }
                for party in message.parties.values()
            ],
            'marktlokationen': [
                {
                    'insert': "INSERT INTO marktlokationen (message_ref, malo_id, valid) VALUES ($1, $2, $3)",
                    'params': [metadata.reference_number, malo.id, malo.valid],
                }
                for malo in (stammdaten.marktlokationen if stammdaten else [])
            ],
        },
    }
