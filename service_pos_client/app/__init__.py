"""
POS client service package.

Runs the client-side orchestration of the point-of-sale application: the
entitlement lifecycle controller and the five business modules it gates.

- app.main: FastAPI app exposing session, license and module routes.
- app.licensing: License state store, periodic verifier, interstitial
  scheduling, write gate and activation flow.
- app.session: The session view state machine.
- app.modules: Sales, inventory, reporting, returns and settings facades
  over the data service, plus the role permission table.
- app.auth: Login against the data service.

Design notes:
- Module import must not perform network calls; all IO happens in the
  startup hook, route handlers or the verifier task.
- Use the shared/ utilities for logging, metrics, retries and errors.
"""
