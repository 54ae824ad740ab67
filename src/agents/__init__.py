"""Multi-agent system for handling customer service requests.

This module contains the orchestrator and specialized agents:
- Orchestrator: Delegates requests to specialists through tool calls
- Address Specialist: Delivery address and shipping detail changes
- Damage Specialist: Damaged, broken or defective items
- Dummy Specialist: Test agent answering 'ping' and demo requests
"""
