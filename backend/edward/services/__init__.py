# Services package init
"""
Edward Backend — Services Layer
=================================

What:  Business logic between the routes (HTTP) and the models (persistence).

Service Inventory:
    - upsert:            conditional insert-or-update on a natural key
    - ordering:          order records: heal on read, membership, rearrange, remove
    - storage:           storage mode per tier and the ServerStorage handle
    - chapter_service:   chapters and their master topic bindings
    - topic_service:     master topics
    - plan_service:      plans and sections
    - workshop_service:  workshops
    - document_service:  documents, cascading delete, bulk first save
    - user_service:      account tier reporting and upgrade

Every content service method takes a ServerStorage as its first argument;
none of them holds state between requests.
"""
