from typing import List

from edifact_models import GraphNode, GraphRelation, StructuredMessage


def _party_relationship(role: str) -> str:
    if role == 'sender':
        return 'SENT_BY'
    if role == 'receiver':
        return 'RECEIVED_BY'
    return f"HAS_{role.upper()}"


def extract_graph_relations(message: StructuredMessage) -> List[GraphRelation]:
    """Projects a message onto (from, to, relationship, properties) triples."""
    relations: List[GraphRelation] = []
    message_node = GraphNode(type='Message', id=message.metadata.reference_number)

    for role, party in message.parties.items():
        relations.append(GraphRelation(
            from_entity=message_node,
            to_entity=GraphNode(type='Party', id=party.id),
            relationship=_party_relationship(role),
            properties={'name': party.name, 'role': party.role, 'mp_id_valid': party.valid_mp_id},
        ))

    stammdaten = message.body.stammdaten
    if stammdaten is None:
        return relations

    for malo in stammdaten.marktlokationen:
        relations.append(GraphRelation(
            from_entity=message_node,
            to_entity=GraphNode(type='Marktlokation', id=malo.id),
            relationship='REFERENCES_MALO',
            properties={'valid': malo.valid},
        ))

    for melo in stammdaten.messlokationen:
        melo_node = GraphNode(type='Messlokation', id=melo.id)
        relations.append(GraphRelation(
            from_entity=message_node,
            to_entity=melo_node,
            relationship='REFERENCES_MELO',
            properties={'valid': melo.valid},
        ))
        for malo in stammdaten.marktlokationen:
            relations.append(GraphRelation(
                from_entity=GraphNode(type='Marktlokation', id=malo.id),
                to_entity=melo_node,
                relationship='HAS_MELO',
            ))

    for bilanzkreis in stammdaten.bilanzkreise:
        for party in message.parties.values():
            relations.append(GraphRelation(
                from_entity=GraphNode(type='Party', id=party.id),
                to_entity=GraphNode(type='Bilanzkreis', id=bilanzkreis.id),
                relationship='BELONGS_TO_BK',
            ))

    return relations
