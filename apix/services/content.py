"""Deterministic file content for each capability's canonical file.

Every function here is a pure function of the resolved configuration: the
same configuration always produces byte-identical output.
"""

from __future__ import annotations

import json

from apix.models.options import AccountConfig, AuditLogConfig, ContractConfig, TokenConfig, WalletConfig

MARKER = "// Generated by apix."


def header(capability: str) -> str:
    return f"{MARKER} Regenerate with: apix add {capability}\n"


def is_generated(text: str) -> bool:
    return text.startswith(MARKER)


def _client_factory(network: str) -> str:
    method = {"testnet": "forTestnet", "mainnet": "forMainnet", "previewnet": "forPreviewnet"}[network]
    return f"""export function createClient(): Client {{
  const accountId = process.env.HEDERA_ACCOUNT_ID;
  const privateKey = process.env.HEDERA_PRIVATE_KEY;
  if (!accountId || !privateKey) {{
    throw new Error('HEDERA_ACCOUNT_ID and HEDERA_PRIVATE_KEY must be set');
  }}
  return Client.{method}().setOperator(accountId, PrivateKey.fromString(privateKey));
}}
"""


def token_service_file(config: TokenConfig) -> str:
    supply_type = "TokenSupplyType.Finite" if config.supply_type == "finite" else "TokenSupplyType.Infinite"
    max_supply = f"\n      .setMaxSupply({config.max_supply})" if config.supply_type == "finite" else ""
    admin_key = "\n      .setAdminKey(this.operatorKey)" if config.admin_key else ""
    supply_key = "\n      .setSupplyKey(this.operatorKey)" if config.supply_key else ""
    return (
        header("token-service")
        + f"""import {{
  AccountId,
  Client,
  PrivateKey,
  TokenCreateTransaction,
  TokenId,
  TokenInfoQuery,
  TokenMintTransaction,
  TokenSupplyType,
  TransferTransaction,
}} from '@hashgraph/sdk';

export const TOKEN_NAME = {json.dumps(config.name)};
export const TOKEN_SYMBOL = {json.dumps(config.symbol)};
export const TOKEN_DECIMALS = {config.decimals};
export const TOKEN_INITIAL_SUPPLY = {config.initial_supply};

{_client_factory(config.network)}
export class HTSManager {{
  constructor(
    private readonly client: Client,
    private readonly treasury: AccountId,
    private readonly operatorKey: PrivateKey,
  ) {{}}

  async createToken(): Promise<TokenId> {{
    const transaction = new TokenCreateTransaction()
      .setTokenName(TOKEN_NAME)
      .setTokenSymbol(TOKEN_SYMBOL)
      .setDecimals(TOKEN_DECIMALS)
      .setInitialSupply(TOKEN_INITIAL_SUPPLY)
      .setTreasuryAccountId(this.treasury)
      .setSupplyType({supply_type}){max_supply}{admin_key}{supply_key};

    const response = await transaction.execute(this.client);
    const receipt = await response.getReceipt(this.client);
    if (!receipt.tokenId) {{
      throw new Error('Token creation did not return a token id');
    }}
    return receipt.tokenId;
  }}

  async mint(tokenId: TokenId, amount: number) {{
    const transaction = new TokenMintTransaction().setTokenId(tokenId).setAmount(amount);
    const response = await transaction.execute(this.client);
    return response.getReceipt(this.client);
  }}

  async transfer(tokenId: TokenId, to: AccountId, amount: number) {{
    const transaction = new TransferTransaction()
      .addTokenTransfer(tokenId, this.treasury, -amount)
      .addTokenTransfer(tokenId, to, amount);
    const response = await transaction.execute(this.client);
    return response.getReceipt(this.client);
  }}

  async getTokenInfo(tokenId: TokenId) {{
    return new TokenInfoQuery().setTokenId(tokenId).execute(this.client);
  }}
}}
"""
    )


def wallet_connect_file(config: WalletConfig) -> str:
    providers = json.dumps(config.providers)
    return (
        header("wallet-connect")
        + f"""export type WalletProvider = {' | '.join(json.dumps(p) for p in config.providers)};

export const WALLET_PROVIDERS: WalletProvider[] = {providers};
export const DEFAULT_WALLET_PROVIDER: WalletProvider = {json.dumps(config.default_provider)};
export const CONNECTION_FLOW = {json.dumps(config.connection_flow)};
export const APP_NAME = {json.dumps(config.app_name)};
export const HEDERA_NETWORK = {json.dumps(config.network)};

export interface WalletSession {{
  provider: WalletProvider;
  accountId: string;
}}

export class WalletManager {{
  private session: WalletSession | null = null;

  get connected(): boolean {{
    return this.session !== null;
  }}

  async connectWallet(provider: WalletProvider = DEFAULT_WALLET_PROVIDER): Promise<WalletSession> {{
    if (!WALLET_PROVIDERS.includes(provider)) {{
      throw new Error(`Unsupported wallet provider: ${{provider}}`);
    }}
    const accountId = await requestAccount(provider);
    this.session = {{ provider, accountId }};
    return this.session;
  }}

  async disconnectWallet(): Promise<void> {{
    this.session = null;
  }}
}}

async function requestAccount(provider: WalletProvider): Promise<string> {{
  const extension = (globalThis as any)[provider];
  if (!extension || typeof extension.requestAccount !== 'function') {{
    throw new Error(`${{provider}} wallet extension not detected`);
  }}
  return extension.requestAccount({{ appName: APP_NAME, network: HEDERA_NETWORK }});
}}
"""
    )


def smart_contract_file(config: ContractConfig) -> str:
    evm_import = "import { ethers } from 'ethers';\n" if config.deployment_type == "evm" else ""
    evm_helper = (
        """
export function contractInterface(abi: string[]): ethers.Interface {
  return new ethers.Interface(abi);
}
"""
        if config.deployment_type == "evm"
        else ""
    )
    return (
        header("smart-contract")
        + f"""import {{ ContractCreateFlow, ContractId }} from '@hashgraph/sdk';
{evm_import}import {{ createClient }} from '../lib/hedera/accounts';

export const CONTRACT_NAME = {json.dumps(config.name)};
export const CONTRACT_TYPE = {json.dumps(config.contract_type)};
export const DEPLOYMENT_TYPE = {json.dumps(config.deployment_type)};
export const DEPLOY_GAS = {config.gas};

export async function deployContract(bytecode: string): Promise<ContractId> {{
  const client = createClient();
  const response = await new ContractCreateFlow()
    .setBytecode(bytecode)
    .setGas(DEPLOY_GAS)
    .execute(client);
  const receipt = await response.getReceipt(client);
  if (!receipt.contractId) {{
    throw new Error(`Deployment of ${{CONTRACT_NAME}} did not return a contract id`);
  }}
  return receipt.contractId;
}}
{evm_helper}"""
    )


def audit_log_file(config: AuditLogConfig) -> str:
    submit_key = "\n      .setSubmitKey(this.operatorKey.publicKey)" if config.submit_key else ""
    return (
        header("audit-log")
        + f"""import {{
  Client,
  PrivateKey,
  TopicCreateTransaction,
  TopicId,
  TopicMessageSubmitTransaction,
}} from '@hashgraph/sdk';

export const TOPIC_NAME = {json.dumps(config.name)};
export const TOPIC_MEMO = {json.dumps(config.memo)};

{_client_factory(config.network)}
export interface AuditEvent {{
  action: string;
  actor: string;
  payload?: Record<string, unknown>;
}}

export class ConsensusService {{
  private topicId: TopicId | null = null;

  constructor(
    private readonly client: Client,
    private readonly operatorKey: PrivateKey,
  ) {{}}

  async createTopic(): Promise<TopicId> {{
    const transaction = new TopicCreateTransaction()
      .setTopicMemo(TOPIC_MEMO){submit_key};
    const response = await transaction.execute(this.client);
    const receipt = await response.getReceipt(this.client);
    if (!receipt.topicId) {{
      throw new Error(`Topic ${{TOPIC_NAME}} was not created`);
    }}
    this.topicId = receipt.topicId;
    return this.topicId;
  }}

  async submitMessage(event: AuditEvent) {{
    if (!this.topicId) {{
      throw new Error('Topic not created');
    }}
    const message = JSON.stringify({{ ...event, topic: TOPIC_NAME }});
    const response = await new TopicMessageSubmitTransaction()
      .setTopicId(this.topicId)
      .setMessage(message)
      .execute(this.client);
    return response.getReceipt(this.client);
  }}
}}
"""
    )


def account_mgmt_file(config: AccountConfig) -> str:
    return (
        header("account-mgmt")
        + f"""import {{
  AccountBalanceQuery,
  AccountCreateTransaction,
  AccountId,
  Client,
  Hbar,
  PrivateKey,
}} from '@hashgraph/sdk';

export const INITIAL_BALANCE_TINYBARS = {config.initial_balance};
export const MAX_AUTO_ASSOCIATIONS = {config.max_auto_associations};

{_client_factory(config.network)}
export class AccountManager {{
  constructor(private readonly client: Client) {{}}

  async createAccount(): Promise<{{ accountId: AccountId; privateKey: PrivateKey }}> {{
    const privateKey = PrivateKey.generateED25519();
    const response = await new AccountCreateTransaction()
      .setKey(privateKey.publicKey)
      .setInitialBalance(Hbar.fromTinybars(INITIAL_BALANCE_TINYBARS))
      .setMaxAutomaticTokenAssociations(MAX_AUTO_ASSOCIATIONS)
      .execute(this.client);
    const receipt = await response.getReceipt(this.client);
    if (!receipt.accountId) {{
      throw new Error('Account creation did not return an account id');
    }}
    return {{ accountId: receipt.accountId, privateKey }};
  }}

  async getBalance(accountId: AccountId | string) {{
    return new AccountBalanceQuery().setAccountId(accountId).execute(this.client);
  }}
}}
"""
    )
