"""
CampusLog Backend — Services Layer
====================================

What:  Storage abstractions and the domain services built on them.
Why:   Routes only parse HTTP; every rule about required fields, row layouts
       and update merging lives here and is testable without HTTP.

Service Inventory:
    Storage
    - TableStore (abstract): spreadsheet-as-database operations
    - SheetsTableStore / SqlTableStore: Google Sheets and SQL backends
    - BlobStore (abstract): upload + public URL
    - DriveBlobStore / LocalBlobStore: Google Drive and local disk backends

    Domain
    - TripLogService, GeneratorLogService: START/END/CREATE event logs
    - DepartmentService, EmployeeService, StudentService: directory tables
    - FileMovementService: paper-file register/forward/receive/status

Every service gets its collaborators through its constructor; container.py
builds them once at startup.
"""
