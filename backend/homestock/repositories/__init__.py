# Repositories package init
"""
HomeStock Backend — Persistence Layer
=======================================

What:  Query and write logic for each table, one repository per aggregate.
Why:   Services orchestrate; repositories own SQL. A repository wraps one
       AsyncSession and translates "no row" into NotFoundError and driver
       failures into DatabaseError.

Repository Inventory:
    - StockRepository: create / list_all / get_by_id / update_by_id / delete_by_id
"""
