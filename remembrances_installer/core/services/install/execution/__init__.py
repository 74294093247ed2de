"""
L4 Execution: side-effecting collaborators.

Network fetches, archive extraction, file copies and shell startup
file edits. They carry out decisions made in ``domain`` verbatim.
"""
