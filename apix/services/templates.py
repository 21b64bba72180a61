"""Template registry used by template bindings.

Each template id maps to a pure render function of the binding variables.
The plan compiler only references ids; the generation step renders them.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from apix.services.content import header

Renderer = Callable[[dict[str, Any]], str]

TEMPLATES: dict[str, Renderer] = {}


class UnknownTemplate(KeyError):
    pass


def template(template_id: str, capability: str):
    def register(fn: Callable[[dict[str, Any]], str]) -> Renderer:
        def render(variables: dict[str, Any]) -> str:
            return header(capability) + fn(variables)

        TEMPLATES[template_id] = render
        return render

    return register


def has_template(template_id: str) -> bool:
    return template_id in TEMPLATES


def render_template(template_id: str, variables: dict[str, Any]) -> str:
    try:
        renderer = TEMPLATES[template_id]
    except KeyError:
        raise UnknownTemplate(template_id) from None
    return renderer(variables)


def _read_params(method: str, params: tuple[str, ...], pages: bool) -> str:
    if not params:
        return ""
    if method == "GET":
        if pages:
            lines = [f"    const {p} = String(req.query.{p} ?? '');" for p in params]
        else:
            lines = [f"    const {p} = new URL(request.url).searchParams.get('{p}') ?? '';" for p in params]
        return "\n".join(lines) + "\n"
    source = "req.body" if pages else "await request.json()"
    return f"    const {{ {', '.join(params)} }} = {source};\n"


def _route(
    v: dict[str, Any],
    method: str,
    imports: str,
    call: str,
    response: str,
    params: tuple[str, ...] = (),
) -> str:
    """API route handler for the app router, or the pages router when v["router"] is "pages"."""
    if v.get("router") == "pages":
        return f"""import type {{ NextApiRequest, NextApiResponse }} from 'next';
{imports}
export default async function handler(req: NextApiRequest, res: NextApiResponse) {{
  if (req.method !== '{method}') {{
    return res.status(405).json({{ error: 'Method not allowed' }});
  }}
  try {{
{_read_params(method, params, pages=True)}    {call}
    return res.status(200).json({response});
  }} catch (error) {{
    return res.status(500).json({{ error: (error as Error).message }});
  }}
}}
"""
    return f"""import {{ NextResponse }} from 'next/server';
{imports}
export async function {method}(request: Request) {{
  try {{
{_read_params(method, params, pages=False)}    {call}
    return NextResponse.json({response});
  }} catch (error) {{
    return NextResponse.json({{ error: (error as Error).message }}, {{ status: 500 }});
  }}
}}
"""


# Token service

@template("utils/common/hts-operations", "token-service")
def _hts_operations(v: dict[str, Any]) -> str:
    return f"""import {{ AccountId, TokenId }} from '@hashgraph/sdk';
import {{ HTSManager, createClient }} from './hts';

export async function withTokenManager<T>(fn: (manager: HTSManager) => Promise<T>): Promise<T> {{
  const client = createClient();
  try {{
    const operator = client.operatorAccountId as AccountId;
    const key = (client as any).operatorKey;
    return await fn(new HTSManager(client, operator, key));
  }} finally {{
    client.close();
  }}
}}

export const createToken = () => withTokenManager((m) => m.createToken());
export const mintTokens = (tokenId: string, amount: number) =>
  withTokenManager((m) => m.mint(TokenId.fromString(tokenId), amount));
export const transferTokens = (tokenId: string, to: string, amount: number) =>
  withTokenManager((m) => m.transfer(TokenId.fromString(tokenId), AccountId.fromString(to), amount));
export const getTokenInfo = (tokenId: string) =>
  withTokenManager((m) => m.getTokenInfo(TokenId.fromString(tokenId)));

export const DEFAULT_SYMBOL = {json.dumps(v.get("symbol", ""))};
"""


@template("api/nextjs/tokens/create", "token-service")
def _token_create_route(v: dict[str, Any]) -> str:
    return _route(
        v,
        "POST",
        "import { createToken } from '@/lib/hedera/hts-operations';",
        "const tokenId = await createToken();",
        "{ tokenId: tokenId.toString() }",
    )


@template("api/nextjs/tokens/info", "token-service")
def _token_info_route(v: dict[str, Any]) -> str:
    return _route(
        v,
        "GET",
        "import { getTokenInfo } from '@/lib/hedera/hts-operations';",
        "const info = await getTokenInfo(tokenId);",
        "{ name: info.name, symbol: info.symbol, totalSupply: info.totalSupply.toString() }",
        params=("tokenId",),
    )


@template("api/nextjs/tokens/mint", "token-service")
def _token_mint_route(v: dict[str, Any]) -> str:
    return _route(
        v,
        "POST",
        "import { mintTokens } from '@/lib/hedera/hts-operations';",
        "const receipt = await mintTokens(tokenId, Number(amount));",
        "{ status: receipt.status.toString() }",
        params=("tokenId", "amount"),
    )


@template("api/nextjs/tokens/transfer", "token-service")
def _token_transfer_route(v: dict[str, Any]) -> str:
    return _route(
        v,
        "POST",
        "import { transferTokens } from '@/lib/hedera/hts-operations';",
        "const receipt = await transferTokens(tokenId, to, Number(amount));",
        "{ status: receipt.status.toString() }",
        params=("tokenId", "to", "amount"),
    )


@template("components/react/TokenManager", "token-service")
def _token_manager_component(v: dict[str, Any]) -> str:
    name = json.dumps(v.get("name", ""))
    symbol = json.dumps(v.get("symbol", ""))
    return f"""'use client';
import {{ useState }} from 'react';

export default function TokenManager() {{
  const [tokenId, setTokenId] = useState<string | null>(null);
  const [error, setError] = useState<string | null>(null);

  async function create() {{
    setError(null);
    const response = await fetch('/api/tokens/create', {{ method: 'POST' }});
    const body = await response.json();
    if (!response.ok) {{
      setError(body.error);
      return;
    }}
    setTokenId(body.tokenId);
  }}

  return (
    <section>
      <h2>{{{name}}} ({{{symbol}}})</h2>
      <button onClick={{create}}>Create token</button>
      {{tokenId && <p>Token id: {{tokenId}}</p>}}
      {{error && <p role="alert">{{error}}</p>}}
    </section>
  );
}}
"""


@template("hooks/react/useTokenOperations", "token-service")
def _use_token_operations(v: dict[str, Any]) -> str:
    return """import { useCallback, useState } from 'react';
import { createToken, getTokenInfo } from '../lib/hedera/hts-operations';

export function useTokenOperations() {
  const [pending, setPending] = useState(false);

  const run = useCallback(async <T,>(fn: () => Promise<T>): Promise<T> => {
    setPending(true);
    try {
      return await fn();
    } finally {
      setPending(false);
    }
  }, []);

  return {
    pending,
    createToken: () => run(createToken),
    getTokenInfo: (tokenId: string) => run(() => getTokenInfo(tokenId)),
  };
}
"""


@template("scripts/node/create-token", "token-service")
def _create_token_script(v: dict[str, Any]) -> str:
    return """import { createToken } from '../lib/hedera/hts-operations';

createToken()
  .then((tokenId) => console.log(`Created token ${tokenId.toString()}`))
  .catch((error) => {
    console.error(error);
    process.exit(1);
  });
"""


# Wallet connect

@template("utils/common/wallet-service", "wallet-connect")
def _wallet_service(v: dict[str, Any]) -> str:
    return """import { WalletManager, WalletProvider, WalletSession } from './wallet';

const manager = new WalletManager();

export function isConnected(): boolean {
  return manager.connected;
}

export function connect(provider?: WalletProvider): Promise<WalletSession> {
  return manager.connectWallet(provider);
}

export function disconnect(): Promise<void> {
  return manager.disconnectWallet();
}
"""


@template("contexts/react/WalletContext", "wallet-connect")
def _wallet_context(v: dict[str, Any]) -> str:
    return """'use client';
import { createContext, ReactNode, useContext, useState } from 'react';
import { WalletProvider, WalletSession } from '../lib/hedera/wallet';
import { connect, disconnect } from '../lib/hedera/wallet-service';

interface WalletContextValue {
  session: WalletSession | null;
  connect: (provider?: WalletProvider) => Promise<void>;
  disconnect: () => Promise<void>;
}

const WalletContext = createContext<WalletContextValue | null>(null);

export function WalletContextProvider({ children }: { children: ReactNode }) {
  const [session, setSession] = useState<WalletSession | null>(null);
  const value: WalletContextValue = {
    session,
    connect: async (provider) => setSession(await connect(provider)),
    disconnect: async () => {
      await disconnect();
      setSession(null);
    },
  };
  return <WalletContext.Provider value={value}>{children}</WalletContext.Provider>;
}

export function useWallet(): WalletContextValue {
  const value = useContext(WalletContext);
  if (!value) {
    throw new Error('useWallet must be used inside WalletContextProvider');
  }
  return value;
}
"""


@template("components/react/WalletConnectionModal", "wallet-connect")
def _wallet_modal(v: dict[str, Any]) -> str:
    providers = json.dumps(v.get("providers", []))
    return f"""'use client';
import {{ useWallet }} from '../contexts/WalletContext';

const PROVIDERS = {providers};

export default function WalletConnectionModal({{ onClose }}: {{ onClose: () => void }}) {{
  const {{ connect }} = useWallet();
  return (
    <div role="dialog">
      {{PROVIDERS.map((provider) => (
        <button key={{provider}} onClick={{() => connect(provider).then(onClose)}}>
          {{provider}}
        </button>
      ))}}
      <button onClick={{onClose}}>Cancel</button>
    </div>
  );
}}
"""


@template("components/react/WalletConnect", "wallet-connect")
def _wallet_connect_button(v: dict[str, Any]) -> str:
    return """'use client';
import { useState } from 'react';
import { useWallet } from '../contexts/WalletContext';
import WalletConnectionModal from './WalletConnectionModal';

export default function WalletConnect() {
  const { session, disconnect } = useWallet();
  const [open, setOpen] = useState(false);

  if (session) {
    return <button onClick={disconnect}>Disconnect {session.accountId}</button>;
  }
  return (
    <>
      <button onClick={() => setOpen(true)}>Connect wallet</button>
      {open && <WalletConnectionModal onClose={() => setOpen(false)} />}
    </>
  );
}
"""


# Smart contract

@template("utils/common/contract-interaction", "smart-contract")
def _contract_interaction(v: dict[str, Any]) -> str:
    return f"""import {{ ContractCallQuery, ContractExecuteTransaction, ContractFunctionParameters, ContractId }} from '@hashgraph/sdk';
import {{ createClient }} from './accounts';

const GAS = {int(v.get("gas", 0))};

export async function callContract(contractId: string, fn: string, params = new ContractFunctionParameters()) {{
  const client = createClient();
  try {{
    return await new ContractCallQuery()
      .setContractId(ContractId.fromString(contractId))
      .setGas(GAS)
      .setFunction(fn, params)
      .execute(client);
  }} finally {{
    client.close();
  }}
}}

export async function executeContract(contractId: string, fn: string, params = new ContractFunctionParameters()) {{
  const client = createClient();
  try {{
    const response = await new ContractExecuteTransaction()
      .setContractId(ContractId.fromString(contractId))
      .setGas(GAS)
      .setFunction(fn, params)
      .execute(client);
    return await response.getReceipt(client);
  }} finally {{
    client.close();
  }}
}}
"""


@template("api/nextjs/contracts/deploy", "smart-contract")
def _contract_deploy_route(v: dict[str, Any]) -> str:
    return _route(
        v,
        "POST",
        "import { deployContract } from '@/scripts/deploy-contract';",
        "const contractId = await deployContract(bytecode);",
        "{ contractId: contractId.toString() }",
        params=("bytecode",),
    )


@template("hooks/react/useContract", "smart-contract")
def _use_contract(v: dict[str, Any]) -> str:
    return """import { useCallback } from 'react';
import { callContract, executeContract } from '../lib/hedera/contracts';

export function useContract(contractId: string) {
  const call = useCallback((fn: string) => callContract(contractId, fn), [contractId]);
  const execute = useCallback((fn: string) => executeContract(contractId, fn), [contractId]);
  return { call, execute };
}
"""


# Audit log

@template("utils/common/consensus-client", "audit-log")
def _consensus_client(v: dict[str, Any]) -> str:
    return """import { TopicId } from '@hashgraph/sdk';
import { AuditEvent, ConsensusService, createClient } from './consensus';

let service: ConsensusService | null = null;

function getService(): ConsensusService {
  if (!service) {
    const client = createClient();
    service = new ConsensusService(client, (client as any).operatorKey);
  }
  return service;
}

export function createAuditTopic(): Promise<TopicId> {
  return getService().createTopic();
}

export function recordAuditEvent(event: AuditEvent) {
  return getService().submitMessage(event);
}
"""


@template("api/nextjs/audit", "audit-log")
def _audit_route(v: dict[str, Any]) -> str:
    return _route(
        v,
        "POST",
        "import { recordAuditEvent } from '@/lib/hedera/consensus-client';",
        "const receipt = await recordAuditEvent({ action, actor, payload });",
        "{ status: receipt.status.toString() }",
        params=("action", "actor", "payload"),
    )


@template("hooks/react/useAuditLog", "audit-log")
def _use_audit_log(v: dict[str, Any]) -> str:
    return """import { useCallback } from 'react';
import { AuditEvent } from '../lib/hedera/consensus';
import { recordAuditEvent } from '../lib/hedera/consensus-client';

export function useAuditLog(actor: string) {
  return useCallback(
    (action: string, payload?: Record<string, unknown>) =>
      recordAuditEvent({ action, actor, payload } as AuditEvent),
    [actor],
  );
}
"""


@template("server/node/audit-middleware", "audit-log")
def _audit_middleware(v: dict[str, Any]) -> str:
    return """import { recordAuditEvent } from './consensus-client';

export function auditMiddleware(actorOf: (req: any) => string) {
  return (req: any, _res: any, next: () => void) => {
    recordAuditEvent({ action: `${req.method} ${req.url}`, actor: actorOf(req) }).catch((error) =>
      console.error('audit submission failed', error),
    );
    next();
  };
}
"""


# Account management

@template("utils/common/account-client", "account-mgmt")
def _account_client(v: dict[str, Any]) -> str:
    return """import { AccountManager, createClient } from './accounts';

export async function withAccountManager<T>(fn: (manager: AccountManager) => Promise<T>): Promise<T> {
  const client = createClient();
  try {
    return await fn(new AccountManager(client));
  } finally {
    client.close();
  }
}
"""


@template("api/nextjs/accounts", "account-mgmt")
def _accounts_route(v: dict[str, Any]) -> str:
    return _route(
        v,
        "POST",
        "import { withAccountManager } from '@/lib/hedera/account-client';",
        "const { accountId } = await withAccountManager((m) => m.createAccount());",
        "{ accountId: accountId.toString() }",
    )


@template("components/react/AccountManager", "account-mgmt")
def _account_component(v: dict[str, Any]) -> str:
    return """'use client';
import { useState } from 'react';

export default function AccountManager() {
  const [accountId, setAccountId] = useState<string | null>(null);

  async function create() {
    const response = await fetch('/api/accounts', { method: 'POST' });
    const body = await response.json();
    setAccountId(body.accountId ?? null);
  }

  return (
    <section>
      <button onClick={create}>Create account</button>
      {accountId && <p>Account id: {accountId}</p>}
    </section>
  );
}
"""


@template("scripts/node/create-account", "account-mgmt")
def _create_account_script(v: dict[str, Any]) -> str:
    return """import { withAccountManager } from '../lib/hedera/account-client';

withAccountManager((manager) => manager.createAccount())
  .then(({ accountId }) => console.log(`Created account ${accountId.toString()}`))
  .catch((error) => {
    console.error(error);
    process.exit(1);
  });
"""
