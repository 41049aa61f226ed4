# Global search reads from existing tables and owns none.
# Sources (see service.SEARCH_SOURCES):
# - vba_projects: project_name, address, project_number
# - projects: project_name, address, permit_number
# - documents: name
# - submittals: title, permit_number, project_name
# - contacts: name, email, company
# Each search is recorded in activity_logs as "global_search".
